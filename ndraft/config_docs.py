"""Centralized configuration documentation and defaults for ndraft.

This module provides an overview of all configuration options and their
environment variable mappings.
"""

# =============================================================================
# ENVIRONMENT VARIABLES REFERENCE
# =============================================================================

# Data & Storage
# --------------
# NDRAFT_DATA_DIR: Base directory for persistent data (default: ./data)
#   Used for: the application state document (cards, theme, settings)
#
# Generation backend
# ------------------
# NDRAFT_PROXY_URL: Endpoint that accepts {"sessionId", "prompt"} and streams
#   server-sent events back (default: DEFAULT_PROXY_URL below).
#   A proxy URL saved in the user settings takes precedence.
#
# NDRAFT_STREAM_TIMEOUT_SECONDS: Timeout applied to each read of a streaming
#   response, not to the whole response
#   (default: 120). 0 disables the timeout.
#
# Application Ports
# -----------------
# NDRAFT_WEB_PORT: Web server port (default: 8020)
#
# History
# -------
# NDRAFT_HISTORY_CAPACITY: Maximum number of undo snapshots (default: 10)
#
# Development & Testing
# ---------------------
# NDRAFT_LOG_LEVEL: Logging verbosity (default: INFO)
#   Values: DEBUG, INFO, WARNING, ERROR, CRITICAL

# =============================================================================
# CONFIGURATION DEFAULTS
# =============================================================================

DEFAULT_PROXY_URL = "https://ai-proxy.ai-n.workers.dev/api/generate"
DEFAULT_WEB_PORT = 8020
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_STREAM_TIMEOUT_SECONDS = 120.0

# State document
STATE_FILENAME = "ndraft_data_v2.json"
EXPORT_FILENAME_PREFIX = "ndraft_export_"
SESSION_ID_PREFIX = "sess_"

# History defaults
DEFAULT_HISTORY_CAPACITY = 10

# Card defaults
PENDING_RESPONSE = "..."
STOPPED_MARKER = "[Stopped]"
MERGE_STOPPED_MARKER = "[Merge Stopped]"
ERROR_PREFIX = "Error: "
MERGE_ERROR_PREFIX = "Merge Failed: "

# Text-to-speech hand-off
SPEECH_MAX_CHARS = 2000
