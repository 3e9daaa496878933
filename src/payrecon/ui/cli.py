from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from payrecon.app import export_run, reconcile_ledger_file, reconcile_with_provider
from payrecon.config import configure_logging, get_reconcile_settings
from payrecon.domain.model import RequestedMode
from payrecon.domain.periods import parse_iso_date
from payrecon.domain.reconciliation import summarize

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date
    from types import FrameType

    from payrecon.domain.reconciliation import ReconciliationRun

log = logging.getLogger(__name__)


def _add_run_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--from",
        dest="from_date",
        type=str,
        required=True,
        help="First calendar day of the period (YYYY-MM-DD, provider time zone)",
    )
    parser.add_argument(
        "--to",
        dest="to_date",
        type=str,
        required=True,
        help="Last calendar day of the period, inclusive",
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Apply inserts and updates (default is a dry run)",
    )
    parser.add_argument(
        "--export",
        type=Path,
        help="Write the flat per-UID export as CSV to this path",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile bePaid payments with the store")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    file_parser = subparsers.add_parser("file", help="Reconcile an exported ledger file")
    file_parser.add_argument("path", type=Path, help="CSV or xlsx export from bePaid")
    _add_run_arguments(file_parser)

    provider = subparsers.add_parser("provider", help="Reconcile against the bePaid API")
    provider.add_argument(
        "--mode",
        type=RequestedMode,
        choices=list(RequestedMode),
        default=RequestedMode.AUTO,
        help="Ledger fetch strategy (default: %(default)s)",
    )
    _add_run_arguments(provider)

    return parser.parse_args(list(argv))


def _parse_period(args: argparse.Namespace) -> tuple[date, date]:
    from_date = parse_iso_date(args.from_date)
    to_date = parse_iso_date(args.to_date)
    if from_date > to_date:
        raise ValueError("Period start must not be after its end")
    return from_date, to_date


def _report(run: ReconciliationRun, export_path: Path | None) -> None:
    summary = summarize(run, sample_limit=get_reconcile_settings().sample_limit)
    print(json.dumps(summary, indent=2, ensure_ascii=False))  # noqa: T201
    if export_path is not None:
        export_run(run, export_path)


def main(argv: Sequence[str] | None = None) -> None:
    """Run one reconciliation and print its JSON summary.

    Exits 2 on invalid arguments and 1 when the run aborts. Per-record write
    failures do not abort; they are listed in the summary and clear its ``ok`` flag.
    """
    load_dotenv()
    try:
        args = _parse_args(sys.argv[1:] if argv is None else argv)
        from_date, to_date = _parse_period(args)
    except ValueError as exc:
        configure_logging()
        log.error("Invalid arguments: %s", exc)  # noqa: TRY400
        sys.exit(2)

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    dry_run = not args.execute

    try:
        match args.command:
            case "file":
                run = reconcile_ledger_file(
                    args.path,
                    from_date=from_date,
                    to_date=to_date,
                    dry_run=dry_run,
                )
            case "provider":
                run = reconcile_with_provider(
                    from_date=from_date,
                    to_date=to_date,
                    mode=args.mode,
                    dry_run=dry_run,
                )
            case other:
                raise ValueError(f"Unsupported command: {other}")  # noqa: TRY301
        _report(run, args.export)
    except Exception:
        log.exception("Reconciliation aborted")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    log.info("Interrupted by user")
    sys.exit(130)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
