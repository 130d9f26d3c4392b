from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any

from group_health.domain.models import AnalysisReport
from group_health.services.normalize import round_half_up, to_float


def _direction(delta: float | None) -> str:
    if delta is None or delta == 0:
        return "neutral"
    return "improvement" if delta > 0 else "worsening"


def compute_score_delta(current: Any, baseline: Any) -> dict[str, Any]:
    current_value = to_float(current)
    baseline_value = to_float(baseline)
    delta = None
    if current_value is not None and baseline_value is not None:
        delta = current_value - baseline_value
    return {
        "current": current_value,
        "baseline": baseline_value,
        "delta": None if delta is None else round_half_up(delta),
        "direction": _direction(delta),
    }


def _mean_score(reports: list[AnalysisReport], start: date, end: date) -> float | None:
    scores = [
        report.overall_score
        for report in reports
        if report.overall_score is not None and start <= report.day <= end
    ]
    if not scores:
        return None
    return sum(scores) / len(scores)


def compute_week_over_week(
    reports: Iterable[AnalysisReport],
    end: date,
    days: int = 7,
) -> dict[str, Any]:
    """Mean score of the last ``days`` days against the ``days`` before them."""
    items = list(reports)
    current_from = end - timedelta(days=days - 1)
    baseline_to = current_from - timedelta(days=1)
    baseline_from = baseline_to - timedelta(days=days - 1)
    payload = compute_score_delta(
        _mean_score(items, current_from, end),
        _mean_score(items, baseline_from, baseline_to),
    )
    payload["current_from"] = current_from.isoformat()
    payload["baseline_from"] = baseline_from.isoformat()
    payload["scored_days"] = sum(
        1 for report in items if report.is_scored and current_from <= report.day <= end
    )
    return payload
