from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from group_health.domain.constants import STATUS_CRITICAL, STATUS_WARNING
from group_health.domain.models import AnalysisReport, ChatGroup, score_level
from group_health.services.composite_scoring import group_status
from group_health.services.normalize import round_half_up


def latest_reports_by_group(reports: Iterable[AnalysisReport]) -> dict[str, AnalysisReport]:
    latest: dict[str, AnalysisReport] = {}
    for report in reports:
        current = latest.get(report.group_id)
        if current is None or report.day > current.day:
            latest[report.group_id] = report
    return latest


def build_overview(groups: list[ChatGroup], reports: Iterable[AnalysisReport]) -> dict[str, Any]:
    latest = latest_reports_by_group(reports)

    ranking: list[dict[str, Any]] = []
    for group in groups:
        report = latest.get(group.group_id)
        score = report.overall_score if report else None
        ranking.append(
            {
                "group_id": group.group_id,
                "name": group.name,
                "member_count": group.member_count,
                "latest_date": report.day.isoformat() if report else None,
                "latest_messages": report.message_count if report else 0,
                "score": score,
                "level": score_level(score),
                "status": group_status(score),
                "excluded": bool(report and report.is_excluded),
                "downweighted": bool(report and report.score_downweighted),
                "risk_message": (
                    report.risk_status.risk_message if report and report.risk_status else None
                ),
            }
        )
    ranking.sort(key=lambda row: (row["score"] is None, -(row["score"] or 0), row["name"]))

    scores = [row["score"] for row in ranking if row["score"] is not None]
    attention = [row for row in ranking if row["status"] in (STATUS_WARNING, STATUS_CRITICAL)]

    return {
        "group_count": len(groups),
        "member_count": sum(group.member_count for group in groups),
        "latest_messages": sum(row["latest_messages"] for row in ranking),
        "avg_score": round_half_up(sum(scores) / len(scores)) if scores else None,
        "attention_groups": attention,
        "ranking": ranking,
    }
