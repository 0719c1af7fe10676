"""
Quantum Asset Toolbox - Command-Line Shell
==========================================

Main entry point for the Quantum Asset Toolbox. Lists and searches the remote
asset catalog, uploads local files to the asset server and downloads assets
into a local workspace, unpacking zip archives and importing Unity packages.

Usage:
    python main.py list [--search QUERY]
    python main.py upload PATH
    python main.py download NAME [NAME ...]

Global options (before the command) override the saved settings:
    --workspace DIR  --fetch-url URL  --upload-url URL  --timeout SECONDS
    --unity PATH     --save-settings  --verbose

Author: Quantum Asset Toolbox Project
"""

import argparse
import logging
import sys
from concurrent.futures import wait
from dataclasses import replace
from typing import List, Optional

from src.core import config
from src.core.errors import ToolboxError
from src.core.events import OperationFailed, OperationSucceeded, SyncEvent
from src.core.session import Session, ToolboxSettings
from src.core.sync import SyncOrchestrator
from src.utils.config_manager import load_settings, save_settings
from src.utils.logger import setup_logging, shutdown_logging

# Seconds to wait for pending notifications before printing results
NOTIFICATION_FLUSH_TIMEOUT = 5.0


# ============================================================================
# ARGUMENT PARSING
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quantum-toolbox",
        description=f"{config.APP_NAME}: upload, browse and download shared assets"
    )
    parser.add_argument("--workspace", help="Folder downloaded assets are placed under")
    parser.add_argument("--fetch-url", help="Catalog endpoint")
    parser.add_argument("--upload-url", help="Upload endpoint")
    parser.add_argument("--timeout", type=float, help="Network timeout in seconds")
    parser.add_argument("--unity", help="Unity editor binary used to import .unitypackage assets")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the effective settings for future runs"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="Refresh the catalog and list assets")
    list_cmd.add_argument("--search", "-s", default="", help="Case-insensitive name filter")

    upload_cmd = commands.add_parser("upload", help="Upload a local file")
    upload_cmd.add_argument("path", help="File to upload")

    download_cmd = commands.add_parser("download", help="Download assets by name")
    download_cmd.add_argument("names", nargs="+", help="Asset names as shown by 'list'")

    return parser


def apply_overrides(settings: ToolboxSettings, args: argparse.Namespace) -> ToolboxSettings:
    """Return a copy of ``settings`` with command-line options applied."""
    overrides = {
        "workspace_root": args.workspace,
        "fetch_url": args.fetch_url,
        "upload_url": args.upload_url,
        "timeout_seconds": args.timeout,
        "unity_executable": args.unity,
    }
    return replace(settings, **{k: v for k, v in overrides.items() if v is not None})


# ============================================================================
# COMMANDS
# ============================================================================

def print_event(event: SyncEvent) -> None:
    """Listener echoing operation results to the terminal."""
    if isinstance(event, OperationSucceeded):
        print(f"[ok] {event.summary}")
    elif isinstance(event, OperationFailed):
        print(f"[failed] {event.operation} ({event.kind}): {event.message}")


def cmd_list(orchestrator: SyncOrchestrator, args: argparse.Namespace) -> int:
    orchestrator.set_search_query(args.search)
    try:
        orchestrator.refresh_catalog().result()
    except ToolboxError:
        return 1
    finally:
        orchestrator.flush_notifications(NOTIFICATION_FLUSH_TIMEOUT)

    view = orchestrator.current_filtered_view()
    for asset in view:
        print(f"{asset.name}\t{asset.url}")
    if args.search:
        print(f"{len(view)} of {len(orchestrator.catalog)} assets match '{args.search}'")
    return 0


def cmd_upload(orchestrator: SyncOrchestrator, args: argparse.Namespace) -> int:
    try:
        report = orchestrator.upload(args.path).result()
    except ToolboxError:
        return 1
    finally:
        orchestrator.flush_notifications(NOTIFICATION_FLUSH_TIMEOUT)

    if report.refreshed:
        print(f"Catalog now lists {len(orchestrator.catalog)} assets")
    return 0


def cmd_download(orchestrator: SyncOrchestrator, args: argparse.Namespace) -> int:
    try:
        catalog = orchestrator.refresh_catalog().result()
    except ToolboxError:
        orchestrator.flush_notifications(NOTIFICATION_FLUSH_TIMEOUT)
        return 1

    failures = 0
    futures = []
    for name in args.names:
        asset = catalog.find(name)
        if asset is None:
            print(f"[failed] download: no asset named '{name}' in the catalog")
            failures += 1
            continue
        futures.append(orchestrator.download(asset))

    wait(futures)
    orchestrator.flush_notifications(NOTIFICATION_FLUSH_TIMEOUT)
    failures += sum(1 for future in futures if future.exception() is not None)
    return 1 if failures else 0


COMMANDS = {
    "list": cmd_list,
    "upload": cmd_upload,
    "download": cmd_download,
}


# ============================================================================
# APPLICATION ENTRY POINT
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, build a Session from the saved settings and run the
    requested command.

    Returns:
        int: Process exit status (0 on success, 1 if any operation failed).
    """
    args = build_parser().parse_args(argv)

    setup_logging(console_level=logging.INFO if args.verbose else logging.WARNING)
    logger = logging.getLogger(__name__)

    try:
        settings = apply_overrides(load_settings(), args)
        if args.save_settings:
            save_settings(settings)

        with Session(settings) as session:
            session.orchestrator.add_listener(print_event)
            return COMMANDS[args.command](session.orchestrator, args)

    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
