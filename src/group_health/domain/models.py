from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from group_health.domain.constants import (
    DEFAULT_ATMOSPHERE_MELTDOWN_THRESHOLD,
    DEFAULT_AVG_MESSAGES_PER_SPEAKER_TARGET,
    DEFAULT_COLD_START_MESSAGE_THRESHOLD,
    DEFAULT_MICRO_GROUP_MEMBER_THRESHOLD,
    DEFAULT_RESPONSE_SPEED_BASE,
    DEFAULT_TOTAL_HOURS,
    INSUFFICIENT_BOTH,
    INSUFFICIENT_COLD_START,
    INSUFFICIENT_MICRO_GROUP,
    LEVEL_EXCELLENT,
    LEVEL_FAIR,
    LEVEL_GOOD,
    LEVEL_POOR,
    MODE_ALL,
)


@dataclass(frozen=True)
class ScoreThresholds:
    avg_messages_per_speaker_target: float = DEFAULT_AVG_MESSAGES_PER_SPEAKER_TARGET
    response_speed_base: float = DEFAULT_RESPONSE_SPEED_BASE
    atmosphere_meltdown_threshold: float = DEFAULT_ATMOSPHERE_MELTDOWN_THRESHOLD
    cold_start_message_threshold: int = DEFAULT_COLD_START_MESSAGE_THRESHOLD
    micro_group_member_threshold: int = DEFAULT_MICRO_GROUP_MEMBER_THRESHOLD

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BaseMetrics:
    total_messages: int
    total_members: int
    active_speakers: int
    active_hours: float
    total_hours: float = DEFAULT_TOTAL_HOURS
    top20_percentage: float = 0.0
    median_response_interval: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SemanticScores:
    """Scores supplied by the language-analysis collaborator, 0..100."""

    topic_relevance_score: float
    atmosphere_score: float


@dataclass(frozen=True)
class ScoreBreakdown:
    speaker_penetration: int = 0
    avg_messages_per_speaker: int = 0
    response_speed_score: int = 0
    time_distribution_score: int = 0
    topic_relevance_score: int = 0
    atmosphere_score: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class RiskStatus:
    is_new_group: bool = False
    is_micro_group: bool = False
    has_conflict_risk: bool = False
    risk_message: str | None = None

    @property
    def insufficient_data_reason(self) -> str | None:
        if self.is_new_group and self.is_micro_group:
            return INSUFFICIENT_BOTH
        if self.is_new_group:
            return INSUFFICIENT_COLD_START
        if self.is_micro_group:
            return INSUFFICIENT_MICRO_GROUP
        return None

    @property
    def is_provisional(self) -> bool:
        return self.is_new_group or self.is_micro_group


def score_level(score: float | None) -> str | None:
    if score is None:
        return None
    if score >= 80:
        return LEVEL_EXCELLENT
    if score >= 60:
        return LEVEL_GOOD
    if score >= 40:
        return LEVEL_FAIR
    return LEVEL_POOR


@dataclass(frozen=True)
class ConversationInsight:
    """Language-model digest of a day: topics, sentiment split and highlights."""

    topics: tuple[dict[str, Any], ...] = ()
    sentiment: dict[str, int] = field(default_factory=dict)
    key_highlights: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.topics or self.sentiment or self.key_highlights)


@dataclass(frozen=True)
class ChatGroup:
    group_id: str
    name: str
    member_count: int = 0
    description: str = ""
    created_at: date | None = None


@dataclass(frozen=True)
class DailyRecord:
    """One ingested (group, date) snapshot: raw metrics plus opaque display payloads."""

    group_id: str
    day: date
    metrics: BaseMetrics
    semantic: SemanticScores
    group_name: str = ""
    summary: str = ""
    member_stats: tuple[dict[str, Any], ...] = ()
    hourly_activity: tuple[dict[str, Any], ...] = ()
    message_types: tuple[dict[str, Any], ...] = ()
    insight: ConversationInsight = field(default_factory=ConversationInsight)


@dataclass(frozen=True)
class AnalysisReport:
    group_id: str
    day: date
    base_metrics: BaseMetrics
    group_name: str = ""
    score_breakdown: ScoreBreakdown | None = None
    overall_score: int | None = None
    risk_status: RiskStatus | None = None
    is_excluded: bool = False
    thresholds_version: int = 0
    thresholds: ScoreThresholds | None = None
    summary: str = ""
    member_stats: tuple[dict[str, Any], ...] = ()
    hourly_activity: tuple[dict[str, Any], ...] = ()
    message_types: tuple[dict[str, Any], ...] = ()
    insight: ConversationInsight = field(default_factory=ConversationInsight)

    @property
    def report_id(self) -> str:
        return f"{self.group_id}-{self.day.isoformat()}"

    @property
    def message_count(self) -> int:
        return self.base_metrics.total_messages

    @property
    def is_scored(self) -> bool:
        return self.overall_score is not None

    @property
    def score_downweighted(self) -> bool:
        return bool(self.risk_status and self.risk_status.has_conflict_risk)

    @property
    def score_level(self) -> str | None:
        return score_level(self.overall_score)


@dataclass(frozen=True)
class GroupScoringConfig:
    mode: str = MODE_ALL
    group_ids: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ReportRow:
    group_id: str
    group_name: str
    granularity: str
    period_start: date
    period_end: date
    label: str
    message_count: int
    active_speakers: int
    day_count: int
    latest: AnalysisReport

    @property
    def overall_score(self) -> int | None:
        return self.latest.overall_score

    @property
    def summary(self) -> str:
        return self.latest.summary

    @property
    def insight(self) -> ConversationInsight:
        return self.latest.insight

    def to_dict(self) -> dict[str, Any]:
        breakdown = self.latest.score_breakdown
        risk = self.latest.risk_status
        return {
            "group_id": self.group_id,
            "group_name": self.group_name,
            "granularity": self.granularity,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "label": self.label,
            "message_count": self.message_count,
            "active_speakers": self.active_speakers,
            "day_count": self.day_count,
            "overall_score": self.latest.overall_score,
            "excluded": self.latest.is_excluded,
            "score_downweighted": self.latest.score_downweighted,
            "risk_message": risk.risk_message if risk else None,
            "summary": self.latest.summary,
            "key_highlights": "; ".join(self.latest.insight.key_highlights),
            "report_id": self.latest.report_id,
            **(breakdown.to_dict() if breakdown else {}),
        }
