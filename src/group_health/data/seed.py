from __future__ import annotations

from datetime import date, timedelta
import logging
from pathlib import Path
import random
from typing import Any

import pandas as pd

from group_health.domain.constants import DEFAULT_TOTAL_HOURS
from group_health.domain.errors import InvalidMetric
from group_health.domain.models import (
    BaseMetrics,
    ChatGroup,
    ConversationInsight,
    DailyRecord,
    SemanticScores,
)
from group_health.services.normalize import normalize_key, to_float

LOGGER = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "group_id",
    "date",
    "total_messages",
    "total_members",
    "active_speakers",
    "active_hours",
    "topic_relevance_score",
    "atmosphere_score",
)

SAMPLE_GROUPS = (
    ChatGroup("g-product", "Product team", 48, "Roadmap and release coordination", date(2023, 3, 1)),
    ChatGroup("g-support", "Customer support", 36, "Escalations and customer feedback", date(2023, 5, 12)),
    ChatGroup("g-sales", "Sales east region", 22, "Deals, leads and pricing questions", date(2023, 8, 20)),
    ChatGroup("g-eng", "Engineering", 64, "Technical design and incidents", date(2022, 11, 2)),
    ChatGroup("g-marketing", "Marketing campaigns", 15, "Campaign planning", date(2024, 1, 9)),
    ChatGroup("g-board", "Board liaison", 2, "Small coordination group", date(2024, 2, 14)),
)

_SUMMARIES = (
    "Discussion focused on wrapping up current deliverables; the team agreed on next steps.",
    "Several customer complaints were raised and remain open; follow-up is needed.",
    "Quiet day with a few status updates and scheduling messages.",
    "Lively technical discussion with proposals for the upcoming release.",
    "Tension around deadlines; a few heated exchanges were observed.",
)

_MESSAGE_TYPES = ("text", "image", "file", "link")

_TOPICS = (
    "Project progress",
    "Product improvements",
    "Customer feedback",
    "Technical design",
    "Marketing events",
    "Hiring",
    "Release planning",
)

_HIGHLIGHTS = (
    "Delivery is expected ahead of schedule.",
    "Open customer complaints need follow-up.",
    "All-hands meeting scheduled for Monday 10:00.",
    "New feature feedback is mostly positive.",
    "A production incident was resolved the same day.",
    "Deadline pressure raised in several threads.",
)


def _read_csv(path: Path) -> pd.DataFrame:
    if not path.exists() or path.stat().st_size == 0:
        return pd.DataFrame()
    df = pd.read_csv(path, sep=None, engine="python")
    df.columns = [normalize_key(str(c)) for c in df.columns]
    return df


def _is_blank(value: Any) -> bool:
    return value is None or pd.isna(value) or str(value).strip() == ""


def _required_text(row: dict[str, Any], field: str) -> str:
    value = row.get(field)
    if _is_blank(value):
        raise InvalidMetric(field, value, "missing")
    return str(value).strip()


def _optional_number(row: dict[str, Any], field: str) -> float | None:
    value = row.get(field)
    if _is_blank(value):
        return None
    number = to_float(value)
    if number is None:
        raise InvalidMetric(field, value, "must be numeric")
    return number


def _required_number(row: dict[str, Any], field: str) -> float:
    number = _optional_number(row, field)
    if number is None:
        raise InvalidMetric(field, row.get(field), "missing")
    return number


def _required_count(row: dict[str, Any], field: str) -> int:
    number = _required_number(row, field)
    if not number.is_integer():
        raise InvalidMetric(field, row.get(field), "must be a whole number")
    return int(number)


def _row_to_record(row: dict[str, Any]) -> DailyRecord:
    group_id = _required_text(row, "group_id")
    raw_day = _required_text(row, "date")
    try:
        day = pd.Timestamp(raw_day).date()
    except ValueError as exc:
        raise InvalidMetric("date", raw_day, "must be a date (YYYY-MM-DD)") from exc

    total_hours = _optional_number(row, "total_hours")
    top20 = _optional_number(row, "top20_percentage")
    metrics = BaseMetrics(
        total_messages=_required_count(row, "total_messages"),
        total_members=_required_count(row, "total_members"),
        active_speakers=_required_count(row, "active_speakers"),
        active_hours=_required_number(row, "active_hours"),
        total_hours=DEFAULT_TOTAL_HOURS if total_hours is None else total_hours,
        top20_percentage=0.0 if top20 is None else top20,
        median_response_interval=_optional_number(row, "median_response_interval"),
    )
    semantic = SemanticScores(
        topic_relevance_score=_required_number(row, "topic_relevance_score"),
        atmosphere_score=_required_number(row, "atmosphere_score"),
    )
    summary = row.get("summary")
    group_name = row.get("group_name")
    highlights = row.get("key_highlights")
    insight = ConversationInsight()
    if not _is_blank(highlights):
        insight = ConversationInsight(
            key_highlights=tuple(part.strip() for part in str(highlights).split(";") if part.strip())
        )
    return DailyRecord(
        group_id=group_id,
        day=day,
        metrics=metrics,
        semantic=semantic,
        group_name=group_id if _is_blank(group_name) else str(group_name),
        summary="" if _is_blank(summary) else str(summary),
        insight=insight,
    )


def load_records_csv(path: Path) -> list[DailyRecord]:
    df = _read_csv(path)
    if df.empty:
        LOGGER.warning("No metrics found in %s", path)
        return []
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Metrics CSV {path} is missing columns: {', '.join(missing)}")

    records: list[DailyRecord] = []
    for index, row in enumerate(df.to_dict(orient="records")):
        try:
            records.append(_row_to_record(row))
        except InvalidMetric:
            # header is line 1
            LOGGER.error("Rejected line %d of %s", index + 2, path)
            raise
    LOGGER.info("Read %d daily records from %s", len(records), path)
    return records


def _hourly_activity(rng: random.Random, total_messages: int) -> tuple[dict[str, Any], ...]:
    weights = [rng.random() * (3.0 if 9 <= hour <= 18 else 0.5) for hour in range(24)]
    total_weight = sum(weights) or 1.0
    return tuple(
        {"hour": hour, "count": int(total_messages * weight / total_weight)}
        for hour, weight in enumerate(weights)
    )


def _member_stats(
    rng: random.Random, group: ChatGroup, speakers: int, total_messages: int
) -> tuple[dict[str, Any], ...]:
    shares = sorted((rng.random() for _ in range(speakers)), reverse=True)
    total_share = sum(shares) or 1.0
    return tuple(
        {"name": f"{group.name} member {index + 1}", "message_count": int(total_messages * share / total_share)}
        for index, share in enumerate(shares[:8])
    )


def _message_types(rng: random.Random, total_messages: int) -> tuple[dict[str, Any], ...]:
    weights = [0.75, 0.12, 0.07, 0.06]
    weights = [weight * (0.8 + rng.random() * 0.4) for weight in weights]
    total_weight = sum(weights)
    return tuple(
        {
            "type": kind,
            "count": int(total_messages * weight / total_weight),
            "percentage": round(weight / total_weight * 100, 1),
        }
        for kind, weight in zip(_MESSAGE_TYPES, weights)
    )


def _insight(rng: random.Random, total_messages: int, atmosphere: float) -> ConversationInsight:
    if total_messages == 0:
        return ConversationInsight()
    negative = int((100 - atmosphere) * rng.uniform(0.2, 0.5))
    positive = min(100 - negative, int(atmosphere * rng.uniform(0.5, 0.8)))
    sentiment = {"positive": positive, "neutral": 100 - positive - negative, "negative": negative}

    names = rng.sample(_TOPICS, k=rng.randint(3, 5))
    shares = sorted((rng.random() for _ in names), reverse=True)
    total_share = sum(shares)
    topics = tuple(
        {
            "name": name,
            "count": int(total_messages * share / total_share),
            "sentiment": rng.choices(list(sentiment), weights=list(sentiment.values()))[0],
        }
        for name, share in zip(names, shares)
    )
    return ConversationInsight(
        topics=topics,
        sentiment=sentiment,
        key_highlights=tuple(rng.sample(_HIGHLIGHTS, k=rng.randint(2, 3))),
    )


def generate_sample_records(
    groups: tuple[ChatGroup, ...] | list[ChatGroup] = SAMPLE_GROUPS,
    end: date | None = None,
    days: int = 60,
    seed: int = 7,
) -> list[DailyRecord]:
    """Deterministic sample metrics: the same seed always yields the same records."""
    end = end or date.today()
    rng = random.Random(seed)
    records: list[DailyRecord] = []
    for group in groups:
        activity = 0.3 + rng.random()
        for offset in range(days - 1, -1, -1):
            day = end - timedelta(days=offset)
            weekend = day.weekday() >= 5
            members = group.member_count
            speakers = min(members, int(members * activity * rng.uniform(0.2, 0.7)))
            total_messages = int(speakers * rng.uniform(2, 30) * (0.4 if weekend else 1.0))
            if total_messages == 0:
                speakers = 0
            active_hours = min(24, max(0, int(rng.gauss(9 if not weekend else 3, 2))))
            interval = round(rng.uniform(20, 420), 1) if total_messages > 1 else None
            metrics = BaseMetrics(
                total_messages=total_messages,
                total_members=members,
                active_speakers=speakers,
                active_hours=active_hours,
                total_hours=24,
                top20_percentage=round(rng.uniform(35, 90), 1),
                median_response_interval=interval,
            )
            semantic = SemanticScores(
                topic_relevance_score=round(rng.uniform(40, 95), 1),
                atmosphere_score=round(min(100.0, max(0.0, rng.gauss(65, 20))), 1),
            )
            records.append(
                DailyRecord(
                    group_id=group.group_id,
                    day=day,
                    metrics=metrics,
                    semantic=semantic,
                    group_name=group.name,
                    summary=rng.choice(_SUMMARIES),
                    member_stats=_member_stats(rng, group, speakers, total_messages),
                    hourly_activity=_hourly_activity(rng, total_messages),
                    message_types=_message_types(rng, total_messages),
                    insight=_insight(rng, total_messages, semantic.atmosphere_score),
                )
            )
    return records
