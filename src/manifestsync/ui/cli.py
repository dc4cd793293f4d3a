from __future__ import annotations

import argparse
import logging
import sys
import threading
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from manifestsync.app import (
    discover_manifest_locations,
    list_version_records,
    schedule_discovery,
)
from manifestsync.config import ConfigurationError, configure_logging, get_discovery_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from manifestsync.domain.model import VersionRecord

log = logging.getLogger(__name__)

_STOP = threading.Event()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Register catalog locations for repositories listed in a manifest"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (also MANIFESTSYNC_DEBUG)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Run a single discovery pass")
    schedule_parser = subparsers.add_parser(
        "schedule", help="Run discovery passes on the configured schedule"
    )
    schedule_parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single scheduled pass (with timeout) and exit",
    )
    subparsers.add_parser("status", help="Show stored manifest versions")

    return parser.parse_args(list(argv))


def _format_record(record: VersionRecord) -> str:
    registered = record.last_registered_at.isoformat() if record.last_registered_at else "-"
    return (
        f"{record.repo_key}\t{record.manifest_version}\t"
        f"seen={record.last_seen_at.isoformat()}\tregistered={registered}"
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        config = get_discovery_config() if parsed_args.command != "status" else None
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)

    if parsed_args.debug or (config is not None and config.debug):
        configure_logging(level=logging.DEBUG, force=True)

    try:
        if parsed_args.command == "run":
            result = discover_manifest_locations(config=config)
            if result.failed:
                log.warning("Repositories not recorded this pass: %s", ", ".join(result.failed))
        elif parsed_args.command == "schedule":
            schedule_discovery(stop_event=_STOP, config=config, once=parsed_args.once)
        elif parsed_args.command == "status":
            for record in list_version_records():
                print(_format_record(record))  # noqa: T201
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during discovery")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Stop the scheduler gracefully on Ctrl+C or SIGTERM."""
    log.info("Stopping (signal received)")
    if _STOP.is_set():
        sys.exit(0)
    _STOP.set()


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    signal(SIGTERM, sigint_handler)
    main()


if __name__ == "__main__":
    run()
