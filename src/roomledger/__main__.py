"""Entry point for ``python -m roomledger``.

Reads the roommate store's JSON document and prints who owes whom.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from pydantic import ValidationError

from roomledger.config import settings
from roomledger.formatters import (
    format_history,
    format_instructions,
    format_matrix,
    format_monthly_breakdown,
    format_summary,
)
from roomledger.ledger.dates import filter_by_date_range, parse_cli_date
from roomledger.ledger.history import participant_history
from roomledger.ledger.monthly import monthly_breakdown
from roomledger.ledger.records import read_document
from roomledger.ledger.settlement import settle
from roomledger.ledger.summary import summarize

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roomledger",
        description="Settle shared roommate expenses: who pays whom, and why.",
    )
    parser.add_argument(
        "data_file",
        nargs="?",
        default=settings.data_file,
        help="Store JSON document (default: %(default)s).",
    )
    parser.add_argument("--from", dest="start", type=parse_cli_date, help="Start date (inclusive).")
    parser.add_argument("--to", dest="end", type=parse_cli_date, help="End date (inclusive).")
    view = parser.add_mutually_exclusive_group()
    view.add_argument("--monthly", action="store_true", help="Settle each month separately.")
    view.add_argument("--history", metavar="NAME", help="Show one roommate's history.")
    view.add_argument("--matrix", action="store_true", help="Print the debt matrix before the instructions.")
    view.add_argument("--summary", action="store_true", help="Show household spending totals.")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the requested view and print it.  Returns an exit code."""
    args = build_parser().parse_args(argv)

    try:
        document = read_document(args.data_file)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        logger.error("Could not load %s: %s", args.data_file, exc)
        return 1

    participants = document.participants
    expenses = filter_by_date_range(document.expenses, args.start, args.end)
    purchases = filter_by_date_range(document.shared_purchases, args.start, args.end)

    if args.summary:
        summary = summarize(expenses, purchases, participants, document.fixed_costs)
        print(format_summary(summary))
        return 0

    if args.monthly:
        print(format_monthly_breakdown(monthly_breakdown(expenses, purchases, participants)))
        return 0

    report = settle(expenses, purchases, participants)

    if args.history:
        history = participant_history(args.history, report.aggregates, expenses, purchases)
        print(format_history(history))
        return 0

    if args.matrix:
        print(format_matrix(report.aggregates))
        print()
    print(format_instructions(report.instructions, title=_title(args.start, args.end)))
    return 0


def _title(start: date | None, end: date | None) -> str:
    if start and end:
        return f"Settlement from {start:%d-%m-%Y} to {end:%d-%m-%Y}"
    if start:
        return f"Settlement from {start:%d-%m-%Y}"
    if end:
        return f"Settlement until {end:%d-%m-%Y}"
    return "All Time Settlement"


def main() -> None:
    """Launch the RoomLedger command-line report."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(run())


if __name__ == "__main__":
    main()
