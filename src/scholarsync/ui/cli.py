from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from scholarsync import app
from scholarsync.config import (
    MissingConfigurationError,
    configure_logging,
    get_storage_config,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise scholarships from the catalogue API")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "import-api",
        aliases=["queue-api"],
        help="Fetch the API and queue its scholarships for import and archival",
    )

    manual = subparsers.add_parser("import-json", help="Queue scholarships from a JSON document")
    manual.add_argument(
        "file",
        nargs="?",
        type=str,
        help="Path to a JSON file (reads stdin when omitted or '-')",
    )
    manual.add_argument(
        "--archive-missing",
        action="store_true",
        help="Also archive published scholarships missing from this document",
    )

    process = subparsers.add_parser("process", help="Drain the import and archive queues")
    _add_process_arguments(process)

    run = subparsers.add_parser("run", help="Fetch, queue and process in one cycle")
    _add_process_arguments(run)

    subparsers.add_parser("test-api", help="Fetch once and report the number of items")

    configure = subparsers.add_parser("configure", help="Persist API settings")
    configure.add_argument("--api-url", type=str, help="Scholarship API endpoint")
    configure.add_argument("--client-id", type=str, help="API client id")
    configure.add_argument("--client-secret", type=str, help="API client secret")

    timestamps = subparsers.add_parser(
        "remove-timestamps",
        help="Clear import stamps so the next import rewrites scholarships",
    )
    timestamps.add_argument(
        "--code",
        type=str,
        help="Only clear the stamp of scholarships with this code",
    )

    return parser.parse_args(list(argv))


def _add_process_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-items",
        type=int,
        help="Maximum number of import items to process before stopping",
    )
    parser.add_argument(
        "--min-archive-batch",
        type=int,
        help="Smallest batch trusted for archival (defaults to config)",
    )


def _validate(args: argparse.Namespace) -> None:
    if getattr(args, "max_items", None) is not None and args.max_items < 1:
        raise ValueError("--max-items must be positive")
    if getattr(args, "min_archive_batch", None) is not None and args.min_archive_batch < 0:
        raise ValueError("--min-archive-batch must be non-negative")
    if args.command == "configure" and not any(
        value is not None for value in (args.api_url, args.client_id, args.client_secret)
    ):
        raise ValueError("Nothing to configure: pass --api-url, --client-id or --client-secret")
    if args.command == "import-json" and args.file not in (None, "-"):
        if not Path(args.file).is_file():
            raise ValueError(f"No such file: {args.file}")


def _read_manual_input(path: str | None) -> str:
    if path in (None, "-"):
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _load_settings() -> None:
    load_dotenv()
    settings_path = get_storage_config().settings_path(ensure=False)
    if settings_path.is_file():
        load_dotenv(settings_path)


def _run_command(args: argparse.Namespace) -> None:
    command = args.command
    if command in {"import-api", "queue-api"}:
        queued = app.queue_api_import()
        log.info("Queued %s scholarships for import", queued.enqueued)
    elif command == "import-json":
        queued = app.queue_manual_import(
            _read_manual_input(args.file),
            archive_missing=args.archive_missing,
        )
        if queued.enqueued:
            log.info("Queued %s scholarships for import", queued.enqueued)
        else:
            log.warning("No scholarships were added to the queue")
    elif command in {"process", "run"}:
        runner = app.run_cycle if command == "run" else app.process_queues
        result = runner(
            max_items=args.max_items,
            min_archive_batch_size=args.min_archive_batch,
        )
        log.info(
            "Queue run finished: created=%s, updated=%s, skipped=%s, archived=%s",
            result.created,
            result.updated,
            result.skipped,
            result.archived,
        )
    elif command == "test-api":
        fetched = app.test_api()
        if not fetched.ok:
            raise RuntimeError(f"API test failed: {fetched.error}")
        log.info("API test succeeded: %s items", len(fetched.records))
    elif command == "configure":
        app.configure_settings(
            api_url=args.api_url,
            client_id=args.client_id,
            client_secret=args.client_secret,
        )
    elif command == "remove-timestamps":
        cleared = app.remove_timestamps(code=args.code)
        log.info("Removed %s import stamps", cleared)
    else:
        raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    _load_settings()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run_command(parsed_args)
    except MissingConfigurationError as exc:
        log.error("%s (run 'scholarsync configure --api-url ...' first)", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
