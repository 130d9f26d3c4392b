from __future__ import annotations

import argparse
from datetime import date
import logging
from pathlib import Path
import sys

from group_health.app.context import build_context
from group_health.config import configure_logging, load_settings
from group_health.domain.constants import GRANULARITIES, GRANULARITY_WEEK
from group_health.domain.errors import GroupHealthError
from group_health.services.period_aggregation import query_report_rows, rows_to_frame

LOGGER = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "label",
    "group_name",
    "message_count",
    "active_speakers",
    "overall_score",
    "score_downweighted",
    "excluded",
    "risk_message",
]


def _parse_day(value: str | None, flag: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid {flag} date (expected YYYY-MM-DD): {value}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print aggregated chat-group health reports.")
    parser.add_argument("--granularity", choices=GRANULARITIES, default=GRANULARITY_WEEK)
    parser.add_argument("--group", default="all", help="Group id, or 'all'.")
    parser.add_argument("--from", dest="date_from", help="First day (YYYY-MM-DD).")
    parser.add_argument("--to", dest="date_to", help="Last day (YYYY-MM-DD).")
    parser.add_argument("--today", help="End date for generated sample data (YYYY-MM-DD).")
    parser.add_argument("--output", type=Path, help="Write all columns as CSV to this path.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        settings = load_settings()
        date_from = _parse_day(args.date_from, "--from")
        date_to = _parse_day(args.date_to, "--to")
        today = _parse_day(args.today, "--today")
        ctx = build_context(settings, today=today)
    except (GroupHealthError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1

    rows = query_report_rows(
        ctx.reports.list_reports(),
        granularity=args.granularity,
        group_id=args.group,
        date_from=date_from,
        date_to=date_to,
    )
    if not rows:
        LOGGER.info("No reports match the given filters.")
        return 0

    frame = rows_to_frame(rows)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(args.output, index=False)
        LOGGER.info("Saved %d rows to %s", len(frame), args.output)
    else:
        sys.stdout.write(frame[SUMMARY_COLUMNS].to_string(index=False) + "\n")

    LOGGER.info("Summary: %d %s rows", len(rows), args.granularity)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
