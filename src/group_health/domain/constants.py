from __future__ import annotations

DEFAULT_AVG_MESSAGES_PER_SPEAKER_TARGET = 20.0
DEFAULT_RESPONSE_SPEED_BASE = 300.0
DEFAULT_ATMOSPHERE_MELTDOWN_THRESHOLD = 30.0
DEFAULT_COLD_START_MESSAGE_THRESHOLD = 5
DEFAULT_MICRO_GROUP_MEMBER_THRESHOLD = 3
DEFAULT_TOTAL_HOURS = 24

SCORE_MIN = 0
SCORE_MAX = 100

STATISTICAL_WEIGHT = 0.6
SEMANTIC_WEIGHT = 0.4

STATISTICAL_DIMENSION_WEIGHTS = {
    "speaker_penetration": 0.35,
    "avg_messages_per_speaker": 0.25,
    "response_speed_score": 0.20,
    "time_distribution_score": 0.20,
}

SEMANTIC_DIMENSION_WEIGHTS = {
    "topic_relevance_score": 0.70,
    "atmosphere_score": 0.30,
}

MODE_ALL = "all"
MODE_INCLUDE = "include"
MODE_EXCLUDE = "exclude"
SCORING_MODES = (MODE_ALL, MODE_INCLUDE, MODE_EXCLUDE)

SCORING_MODE_LABELS = {
    MODE_ALL: "All groups are scored",
    MODE_INCLUDE: "Only listed groups are scored",
    MODE_EXCLUDE: "Listed groups are excluded from scoring",
}

GRANULARITY_DAY = "day"
GRANULARITY_WEEK = "week"
GRANULARITY_MONTH = "month"
GRANULARITIES = (GRANULARITY_DAY, GRANULARITY_WEEK, GRANULARITY_MONTH)

DEFAULT_TREND_LOOKBACK_DAYS = 7

LEVEL_EXCELLENT = "excellent"
LEVEL_GOOD = "good"
LEVEL_FAIR = "fair"
LEVEL_POOR = "poor"

LEVEL_LABELS = {
    LEVEL_EXCELLENT: "Excellent",
    LEVEL_GOOD: "Good",
    LEVEL_FAIR: "Fair",
    LEVEL_POOR: "Poor",
}

STATUS_HEALTHY = "healthy"
STATUS_WARNING = "warning"
STATUS_CRITICAL = "critical"

INSUFFICIENT_COLD_START = "cold_start"
INSUFFICIENT_MICRO_GROUP = "micro_group"
INSUFFICIENT_BOTH = "both"

METRIC_LABELS = {
    "total_messages": "Total messages",
    "total_members": "Members",
    "active_speakers": "Active speakers",
    "active_hours": "Active hours",
    "top20_percentage": "Top 20% share",
    "median_response_interval": "Median response interval (s)",
}

DIMENSION_LABELS = {
    "speaker_penetration": "Speaker penetration",
    "avg_messages_per_speaker": "Messages per speaker",
    "response_speed_score": "Response speed",
    "time_distribution_score": "Time distribution",
    "topic_relevance_score": "Topic relevance",
    "atmosphere_score": "Atmosphere",
}
