"""
xssh command line interface.

Usage:
    xssh <destination> [--tmux NAME] [--save [--overwrite]]
    xssh --sync tailscale [--overwrite]
"""

import argparse
import logging
from typing import List, Optional

from rich.logging import RichHandler

from . import __version__
from .exceptions import XsshError
from .models import XsshSettings
from .session import build_ssh_args, launch
from .sync import SYNC_SOURCES, save_destination
from .utils.config import load_settings
from .utils.display import (
    display_error, display_success, display_sync_header, display_sync_summary,
    display_warning
)


def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="xssh",
        description="Open SSH sessions and sync SSH config hosts from Tailscale",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  xssh web1
  xssh ubuntu@10.0.0.4 --tmux main
  xssh db1 --save
  xssh --sync tailscale
  xssh --sync tailscale --overwrite
        """
    )

    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "destination",
        nargs="?",
        help="Host to connect to ([user@]host or a Host alias)"
    )
    target.add_argument(
        "--sync",
        metavar="SOURCE",
        help="Sync hosts into the SSH config from SOURCE (supported: tailscale)"
    )

    parser.add_argument(
        "-t", "--tmux",
        metavar="NAME",
        help="Attach to (or create) the tmux session NAME on the destination"
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Save the destination to the SSH config before connecting"
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace existing SSH config entries with the same name"
    )
    parser.add_argument(
        "--config-file",
        help="Path to the xssh YAML settings file (default: ~/.config/xssh/config.yaml)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def run_sync(source: str, overwrite: bool, settings: XsshSettings) -> int:
    """Sync hosts from a named source into the SSH config."""
    sync = SYNC_SOURCES[source]
    display_sync_header(source)

    result = sync(overwrite=overwrite, settings=settings)
    display_sync_summary(result)

    if result.failed:
        display_warning(f"{len(result.failed)} entries could not be written to {result.store.file_path}")
    else:
        display_success(f"✅ SSH config synced: {result.store.file_path}")
    return 0


def connect(args: argparse.Namespace, settings: XsshSettings) -> int:
    """Optionally save the destination, then open the ssh session."""
    if args.save:
        result = save_destination(args.destination, overwrite=args.overwrite, settings=settings)
        for name, error in result.failed:
            display_error(f"Error writing {name} to file: {error}")

    return launch(build_ssh_args(args.destination, args.tmux, settings))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.sync is None and not args.destination:
        parser.print_help()
        return 0

    if args.sync is not None and args.sync not in SYNC_SOURCES:
        display_error("Invalid sync source!")
        return 0

    try:
        settings = load_settings(args.config_file)
        if args.sync is not None:
            return run_sync(args.sync, args.overwrite, settings)
        return connect(args, settings)
    except XsshError as e:
        display_error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        display_warning("\nInterrupted by user")
        return 1

