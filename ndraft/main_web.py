import argparse
import logging
import sys

import uvicorn

from ndraft.config import Config
from ndraft.config_docs import LOG_LEVELS
from ndraft.exceptions import ConfigurationError
from ndraft.logger import ConsoleLogger, Logger, session_logger
from ndraft.web_server import NdraftWebServer

logger: Logger = session_logger


def main() -> int:
    parser = argparse.ArgumentParser(description="ndraft Web Server - card-based AI drafting")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host address to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port number to listen on (default: 8020, or NDRAFT_WEB_PORT env var)",
    )
    parser.add_argument(
        "--state-file",
        type=str,
        default=None,
        help="Path to the state document (default: <data dir>/ndraft_data_v2.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity (default: INFO, or NDRAFT_LOG_LEVEL env var)",
    )
    args = parser.parse_args()

    try:
        level = getattr(logging, args.log_level) if args.log_level else Config.get_log_level()
        if isinstance(session_logger, ConsoleLogger):
            session_logger.set_level(level)
        port = args.port or Config.get_web_port()
        server = NdraftWebServer(state_path=args.state_file)
    except (ConfigurationError, ValueError) as e:
        logger.error("FATAL: Invalid configuration", error=str(e))
        return 1

    try:
        logger.info(
            "Starting web server",
            host=args.host,
            port=port,
            transport="HTTP REST API + SSE",
            state_file=str(server.controller.state_store.path),
        )
        uvicorn.run(server.app, host=args.host, port=port)
        logger.info("Web server shutdown complete")
    except KeyboardInterrupt:
        logger.info("Web server stopped by user")
    except Exception as e:
        logger.error("Failed to start web server", error=str(e), error_type=type(e).__name__)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
