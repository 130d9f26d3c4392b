from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any

import pandas as pd

from group_health.domain.constants import (
    DEFAULT_TREND_LOOKBACK_DAYS,
    GRANULARITIES,
    GRANULARITY_DAY,
    GRANULARITY_MONTH,
    GRANULARITY_WEEK,
    METRIC_LABELS,
)
from group_health.domain.models import AnalysisReport, ReportRow
from group_health.services.normalize import round_half_up


def week_start(day: date) -> date:
    # Monday-start weeks, Sunday belongs to the preceding Monday
    return day - timedelta(days=day.weekday())


def _period_bounds(day: date, granularity: str) -> tuple[date, date, str]:
    if granularity == GRANULARITY_DAY:
        return day, day, day.isoformat()
    if granularity == GRANULARITY_WEEK:
        start = week_start(day)
        iso_year, iso_week, _ = start.isocalendar()
        return start, start + timedelta(days=6), f"{iso_year}-W{iso_week:02d}"
    if granularity == GRANULARITY_MONTH:
        start = day.replace(day=1)
        last_day = calendar.monthrange(day.year, day.month)[1]
        return start, day.replace(day=last_day), f"{day.year}-{day.month:02d}"
    raise ValueError(f"Unknown granularity: {granularity!r} (expected one of {GRANULARITIES})")


def _sort_rows(rows: list[ReportRow]) -> list[ReportRow]:
    rows.sort(key=lambda row: row.group_id)
    rows.sort(key=lambda row: row.period_start, reverse=True)
    return rows


def aggregate_reports(reports: Iterable[AnalysisReport], granularity: str) -> list[ReportRow]:
    """
    Roll daily reports up into day, week or month rows.

    Message counts are summed and active speakers averaged; every other
    field comes from the most recent day of the period.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity: {granularity!r} (expected one of {GRANULARITIES})")

    buckets: dict[tuple[str, date], list[AnalysisReport]] = defaultdict(list)
    bounds: dict[tuple[str, date], tuple[date, date, str]] = {}
    for report in reports:
        start, end, label = _period_bounds(report.day, granularity)
        key = (report.group_id, start)
        buckets[key].append(report)
        bounds[key] = (start, end, label)

    rows: list[ReportRow] = []
    for key, items in buckets.items():
        start, end, label = bounds[key]
        latest = max(items, key=lambda item: item.day)
        speakers = [item.base_metrics.active_speakers for item in items]
        rows.append(
            ReportRow(
                group_id=latest.group_id,
                group_name=latest.group_name,
                granularity=granularity,
                period_start=start,
                period_end=end,
                label=label,
                message_count=sum(item.message_count for item in items),
                active_speakers=round_half_up(sum(speakers) / len(speakers)),
                day_count=len({item.day for item in items}),
                latest=latest,
            )
        )
    return _sort_rows(rows)


def filter_reports(
    reports: Iterable[AnalysisReport],
    group_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[AnalysisReport]:
    selected: list[AnalysisReport] = []
    for report in reports:
        if group_id not in (None, "", "all") and report.group_id != group_id:
            continue
        if date_from is not None and report.day < date_from:
            continue
        if date_to is not None and report.day > date_to:
            continue
        selected.append(report)
    return selected


def query_report_rows(
    reports: Iterable[AnalysisReport],
    granularity: str = GRANULARITY_DAY,
    group_id: str | None = "all",
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[ReportRow]:
    return aggregate_reports(filter_reports(reports, group_id, date_from, date_to), granularity)


def trend_window(
    reports: Iterable[AnalysisReport],
    end: date,
    lookback_days: int = DEFAULT_TREND_LOOKBACK_DAYS,
    group_id: str | None = None,
) -> list[AnalysisReport]:
    start = end - timedelta(days=lookback_days)
    window = filter_reports(reports, group_id=group_id, date_from=start, date_to=end)
    return sorted(window, key=lambda report: (report.day, report.group_id))


def trend_lookback_days(
    date_from: date,
    date_to: date,
    minimum: int = DEFAULT_TREND_LOOKBACK_DAYS,
) -> int:
    return max(minimum, (date_to - date_from).days)


def metric_trend_frame(reports: Iterable[AnalysisReport], metric: str) -> pd.DataFrame:
    if metric not in METRIC_LABELS:
        raise ValueError(f"Unknown metric: {metric!r}")
    records: list[dict[str, Any]] = []
    for report in reports:
        value = getattr(report.base_metrics, metric)
        records.append(
            {
                "date": pd.Timestamp(report.day),
                "group_id": report.group_id,
                "metric": METRIC_LABELS[metric],
                "value": 0 if value is None else value,
            }
        )
    if not records:
        return pd.DataFrame(columns=["date", "group_id", "metric", "value"])
    return pd.DataFrame.from_records(records).sort_values(["date", "group_id"]).reset_index(drop=True)


def score_trend_frame(reports: Iterable[AnalysisReport]) -> pd.DataFrame:
    records = [
        {
            "date": pd.Timestamp(report.day),
            "group_id": report.group_id,
            "score": report.overall_score,
        }
        for report in reports
        if report.is_scored
    ]
    if not records:
        return pd.DataFrame(columns=["date", "group_id", "score"])
    return pd.DataFrame.from_records(records).sort_values(["date", "group_id"]).reset_index(drop=True)


def rows_to_frame(rows: Iterable[ReportRow]) -> pd.DataFrame:
    records = [row.to_dict() for row in rows]
    if not records:
        return pd.DataFrame()
    return pd.DataFrame.from_records(records)
