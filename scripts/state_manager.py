#!/usr/bin/env python3
"""State Management CLI

Command-line utility to inspect, export, import and reset the persisted
ndraft state document.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ndraft.config import Config
from ndraft.config_docs import EXPORT_FILENAME_PREFIX
from ndraft.exceptions import MalformedImportError
from ndraft.logger import Logger, session_logger
from ndraft.storage import StateStore


def resolve_state_file(cli_path: Optional[str]) -> str:
    """Resolve the state file from CLI, environment variable, or project default."""
    if cli_path:
        return cli_path

    return str(Config.get_state_file())


def show_state(args):
    """Summarize the state document"""
    logger: Logger = session_logger

    store = StateStore(resolve_state_file(args.state_file))
    if not store.exists():
        logger.info(f"No state file at {store.path}")
        return 0

    state = store.load()
    theme = state.theme
    settings = state.settings

    logger.info("State Summary:")
    logger.info(f"State file:   {store.path}")
    logger.info(f"Session:      {state.session_id}")
    logger.info(f"Cards:        {len(state.cards)}")
    logger.info(f"Theme:        {theme.name} ({theme.mode}{', locked' if theme.locked else ''})")
    logger.info(f"View:         {settings.view.value}")
    logger.info(f"Proxy URL:    {settings.proxy_url or '(default)'}")

    if args.verbose and state.cards:
        logger.info(f"{'Card ID':<38} {'Locked':<7} {'Request'}")
        logger.info("-" * 90)
        for card in state.cards:
            request = card.q.replace("\n", " ")[:40]
            logger.info(f"{card.id:<38} {'yes' if card.is_locked else 'no':<7} {request}")

    return 0


def export_state(args):
    """Write the state document to an export file"""
    logger: Logger = session_logger

    store = StateStore(resolve_state_file(args.state_file))
    output = Path(args.output or f"{EXPORT_FILENAME_PREFIX}{int(time.time() * 1000)}.json")

    try:
        output.write_text(store.export_document(store.load()), encoding="utf-8")
    except OSError as e:
        logger.error(f"Error writing export: {str(e)}")
        return 1

    logger.info(f"Exported state to {output}")
    return 0


def import_state(args):
    """Replace the state document with an exported file"""
    logger: Logger = session_logger

    store = StateStore(resolve_state_file(args.state_file))

    try:
        text = Path(args.input).read_text(encoding="utf-8")
        state = store.parse_document(text, store.load())
    except OSError as e:
        logger.error(f"Error reading import file: {str(e)}")
        return 1
    except MalformedImportError as e:
        logger.error(e.message)
        return 1

    store.save(state)
    logger.info(f"Imported {len(state.cards)} card(s) into {store.path}")
    return 0


def reset_state(args):
    """Delete the state document"""
    logger: Logger = session_logger

    store = StateStore(resolve_state_file(args.state_file))
    if not store.exists():
        logger.info("Nothing to reset.")
        return 0

    logger.warning(f"WARNING: Deleting {store.path}")
    if not args.yes:
        response = input("Are you sure? (yes/no): ")
        if response.lower() != "yes":
            logger.info("Reset cancelled.")
            return 0

    store.delete()
    logger.info("State reset")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="ndraft State Manager - Inspect and manage the persisted board",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python state_manager.py show --verbose
  python state_manager.py export --output backup.json
  python state_manager.py import backup.json
  python state_manager.py reset --yes

  # Custom state file
  python state_manager.py --state-file /custom/ndraft.json show

Environment Variables:
    NDRAFT_DATA_DIR     Override project data directory (optional)
        """,
    )

    parser.add_argument(
        "--state-file",
        type=str,
        default=None,
        help="State document path (default: <data dir>/ndraft_data_v2.json)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    show_parser = subparsers.add_parser("show", help="Summarize the state document")
    show_parser.add_argument("--verbose", "-v", action="store_true", help="List every card")

    export_parser = subparsers.add_parser("export", help="Export the state document")
    export_parser.add_argument("--output", "-o", type=str, default=None, help="Export file path")

    import_parser = subparsers.add_parser("import", help="Import an exported document")
    import_parser.add_argument("input", type=str, help="Exported JSON file")

    reset_parser = subparsers.add_parser("reset", help="Delete the state document")
    reset_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    args = parser.parse_args()

    commands = {
        "show": show_state,
        "export": export_state,
        "import": import_state,
        "reset": reset_state,
    }
    if args.command not in commands:
        parser.print_help()
        return 1

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
