from __future__ import annotations

from group_health.domain.constants import (
    INSUFFICIENT_BOTH,
    INSUFFICIENT_COLD_START,
    INSUFFICIENT_MICRO_GROUP,
)
from group_health.domain.models import BaseMetrics, RiskStatus, ScoreThresholds
from group_health.services.normalize import round_half_up


def _format_threshold(value: float) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else f"{number:g}"


def evaluate_risk(
    metrics: BaseMetrics,
    atmosphere_score: float,
    thresholds: ScoreThresholds,
    member_count: int | None = None,
) -> RiskStatus:
    """
    Classify a day's snapshot into cold-start, micro-group and conflict-risk states.

    Every flag is computed independently. Only one message is surfaced, in
    severity order: conflict risk, then cold start, then micro group.
    """
    members = metrics.total_members if member_count is None else member_count

    is_new_group = metrics.total_messages < thresholds.cold_start_message_threshold
    is_micro_group = members < thresholds.micro_group_member_threshold
    has_conflict_risk = atmosphere_score < thresholds.atmosphere_meltdown_threshold

    message = None
    if has_conflict_risk:
        message = (
            f"Conflict risk: atmosphere score {round_half_up(atmosphere_score)} is below "
            f"{_format_threshold(thresholds.atmosphere_meltdown_threshold)}, score downweighted."
        )
    elif is_new_group:
        message = (
            f"Insufficient data: fewer than "
            f"{_format_threshold(thresholds.cold_start_message_threshold)} messages, "
            "score is provisional."
        )
    elif is_micro_group:
        message = (
            f"Micro group: fewer than "
            f"{_format_threshold(thresholds.micro_group_member_threshold)} members, "
            "score is low-confidence."
        )

    return RiskStatus(
        is_new_group=is_new_group,
        is_micro_group=is_micro_group,
        has_conflict_risk=has_conflict_risk,
        risk_message=message,
    )


INSUFFICIENT_DATA_TEXT = {
    INSUFFICIENT_COLD_START: "Fewer than {messages} messages. Not enough data to score reliably.",
    INSUFFICIENT_MICRO_GROUP: "Fewer than {members} members. Statistics are not meaningful yet.",
    INSUFFICIENT_BOTH: "Fewer than {messages} messages and fewer than {members} members.",
}


def insufficient_data_notice(risk: RiskStatus | None, thresholds: ScoreThresholds) -> str | None:
    """Notice for provisional scores, worded with the thresholds the report was scored under."""
    if risk is None or risk.insufficient_data_reason is None:
        return None
    return INSUFFICIENT_DATA_TEXT[risk.insufficient_data_reason].format(
        messages=_format_threshold(thresholds.cold_start_message_threshold),
        members=_format_threshold(thresholds.micro_group_member_threshold),
    )
