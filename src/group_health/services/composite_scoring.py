from __future__ import annotations

from fractions import Fraction
from typing import Any

from group_health.domain.constants import (
    DIMENSION_LABELS,
    LEVEL_LABELS,
    SCORE_MAX,
    SCORE_MIN,
    SEMANTIC_DIMENSION_WEIGHTS,
    SEMANTIC_WEIGHT,
    STATISTICAL_DIMENSION_WEIGHTS,
    STATISTICAL_WEIGHT,
    STATUS_CRITICAL,
    STATUS_HEALTHY,
    STATUS_WARNING,
)
from group_health.domain.models import ScoreBreakdown, score_level
from group_health.services.normalize import round_half_up

DIMENSIONS: dict[str, dict[str, Any]] = {
    "speaker_penetration": {
        "group": "statistical",
        "description": "Share of members who posted at least once.",
        "formula": "active_speakers / total_members",
    },
    "avg_messages_per_speaker": {
        "group": "statistical",
        "description": "Messages per active speaker against the engagement target.",
        "formula": "min(total_messages / active_speakers / target, 1)",
    },
    "response_speed_score": {
        "group": "statistical",
        "description": "How quickly replies follow each other.",
        "formula": "1 - median_response_interval / response_speed_base",
    },
    "time_distribution_score": {
        "group": "statistical",
        "description": "Share of hours in the day with activity.",
        "formula": "active_hours / total_hours",
    },
    "topic_relevance_score": {
        "group": "semantic",
        "description": "How closely discussion stays on the group's purpose (language model).",
        "formula": "external classification, 0..100",
    },
    "atmosphere_score": {
        "group": "semantic",
        "description": "Tone of the conversation; low values indicate conflict (language model).",
        "formula": "external sentiment analysis, 0..100",
    },
}


def effective_weights() -> dict[str, float]:
    weights = {
        key: STATISTICAL_WEIGHT * weight for key, weight in STATISTICAL_DIMENSION_WEIGHTS.items()
    }
    weights.update(
        {key: SEMANTIC_WEIGHT * weight for key, weight in SEMANTIC_DIMENSION_WEIGHTS.items()}
    )
    return weights


def dimension_table() -> list[dict[str, Any]]:
    weights = effective_weights()
    return [
        {
            "key": key,
            "name": DIMENSION_LABELS[key],
            "weight": weights[key],
            **meta,
        }
        for key, meta in DIMENSIONS.items()
    ]


def _exact_weighted_sum(breakdown: ScoreBreakdown) -> Fraction:
    # weights are decimal literals; Fraction(str(w)) keeps 0.35 as 7/20
    values = breakdown.to_dict()
    statistical = sum(
        Fraction(values[key]) * Fraction(str(weight))
        for key, weight in STATISTICAL_DIMENSION_WEIGHTS.items()
    )
    semantic = sum(
        Fraction(values[key]) * Fraction(str(weight))
        for key, weight in SEMANTIC_DIMENSION_WEIGHTS.items()
    )
    return Fraction(str(STATISTICAL_WEIGHT)) * statistical + Fraction(str(SEMANTIC_WEIGHT)) * semantic


def weighted_sum(breakdown: ScoreBreakdown) -> float:
    return float(_exact_weighted_sum(breakdown))


def compute_overall_score(breakdown: ScoreBreakdown) -> int:
    # Conflict risk is only annotated on the report; the low atmosphere
    # score already pulls the weighted sum down.
    exact = min(max(_exact_weighted_sum(breakdown), Fraction(SCORE_MIN)), Fraction(SCORE_MAX))
    return round_half_up(exact)


def score_level_label(score: float | None) -> str:
    level = score_level(score)
    return LEVEL_LABELS[level] if level else "Not scored"


def group_status(score: float | None) -> str:
    if score is None:
        return STATUS_HEALTHY
    if score < 40:
        return STATUS_CRITICAL
    if score < 60:
        return STATUS_WARNING
    return STATUS_HEALTHY
