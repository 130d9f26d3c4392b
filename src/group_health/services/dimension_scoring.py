from __future__ import annotations

import math
import numbers

from group_health.domain.errors import InvalidMetric
from group_health.domain.models import BaseMetrics, ScoreBreakdown, ScoreThresholds, SemanticScores
from group_health.services.normalize import clamp_score, round_half_up

_COUNT_FIELDS = (
    "total_messages",
    "total_members",
    "active_speakers",
    "active_hours",
    "total_hours",
    "top20_percentage",
)


def _check_number(field: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidMetric(field, value, "must be a number")
    if math.isnan(value):
        raise InvalidMetric(field, value, "must not be NaN")
    if value < 0:
        raise InvalidMetric(field, value)


def validate_metrics(metrics: BaseMetrics) -> None:
    for field in _COUNT_FIELDS:
        _check_number(field, getattr(metrics, field))
    if metrics.median_response_interval is not None:
        _check_number("median_response_interval", metrics.median_response_interval)


def validate_semantic_scores(semantic: SemanticScores) -> None:
    for field in ("topic_relevance_score", "atmosphere_score"):
        value = getattr(semantic, field)
        _check_number(field, value)
        if value > 100:
            raise InvalidMetric(field, value, "must be within 0..100")


def speaker_penetration(metrics: BaseMetrics) -> float:
    if metrics.total_members == 0:
        return 0.0
    return clamp_score(metrics.active_speakers / metrics.total_members * 100)


def avg_messages_per_speaker(metrics: BaseMetrics, thresholds: ScoreThresholds) -> float:
    per_speaker = metrics.total_messages / max(metrics.active_speakers, 1)
    ratio = min(per_speaker / thresholds.avg_messages_per_speaker_target, 1.0)
    return clamp_score(ratio * 100)


def response_speed_score(metrics: BaseMetrics, thresholds: ScoreThresholds) -> float:
    interval = metrics.median_response_interval
    # no observed replies
    if interval is None:
        return 0.0
    return clamp_score((1 - interval / thresholds.response_speed_base) * 100)


def time_distribution_score(metrics: BaseMetrics) -> float:
    return clamp_score(metrics.active_hours / max(metrics.total_hours, 1) * 100)


def score_dimensions(
    metrics: BaseMetrics,
    semantic: SemanticScores,
    thresholds: ScoreThresholds,
) -> ScoreBreakdown:
    validate_metrics(metrics)
    validate_semantic_scores(semantic)

    if metrics.total_messages == 0:
        return ScoreBreakdown()

    return ScoreBreakdown(
        speaker_penetration=round_half_up(speaker_penetration(metrics)),
        avg_messages_per_speaker=round_half_up(avg_messages_per_speaker(metrics, thresholds)),
        response_speed_score=round_half_up(response_speed_score(metrics, thresholds)),
        time_distribution_score=round_half_up(time_distribution_score(metrics)),
        topic_relevance_score=round_half_up(clamp_score(semantic.topic_relevance_score)),
        atmosphere_score=round_half_up(clamp_score(semantic.atmosphere_score)),
    )
