from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any

from group_health.domain.constants import MODE_ALL
from group_health.domain.errors import ConfigurationOutOfRange
from group_health.domain.models import GroupScoringConfig, ScoreThresholds
from group_health.services.participation import make_scoring_config
from group_health.services.thresholds import validate_thresholds

LOGGER = logging.getLogger(__name__)

_THRESHOLD_ENV = {
    "avg_messages_per_speaker_target": ("GROUP_HEALTH_AVG_MESSAGES_TARGET", float),
    "response_speed_base": ("GROUP_HEALTH_RESPONSE_SPEED_BASE", float),
    "atmosphere_meltdown_threshold": ("GROUP_HEALTH_MELTDOWN_THRESHOLD", float),
    "cold_start_message_threshold": ("GROUP_HEALTH_COLD_START_MESSAGES", int),
    "micro_group_member_threshold": ("GROUP_HEALTH_MICRO_GROUP_MEMBERS", int),
}


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    metrics_csv: Path | None
    sample_days: int
    sample_seed: int
    log_level: str
    thresholds: ScoreThresholds
    scoring: GroupScoringConfig


def _parse_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationOutOfRange(name, raw, "must be an integer") from exc


def load_thresholds_from_env() -> ScoreThresholds:
    overrides: dict[str, Any] = {}
    for field, (env_name, cast) in _THRESHOLD_ENV.items():
        raw = os.getenv(env_name)
        if raw in (None, ""):
            continue
        try:
            overrides[field] = cast(raw)
        except ValueError as exc:
            raise ConfigurationOutOfRange(env_name, raw, "must be numeric") from exc
    thresholds = ScoreThresholds(**overrides)
    validate_thresholds(thresholds)
    return thresholds


def load_scoring_config_from_env() -> GroupScoringConfig:
    mode = os.getenv("GROUP_HEALTH_SCORING_MODE", MODE_ALL)
    group_ids = (os.getenv("GROUP_HEALTH_SCORING_GROUPS") or "").split(",")
    return make_scoring_config(mode, group_ids)


def load_settings() -> Settings:
    data_dir = Path(os.getenv("GROUP_HEALTH_DATA_DIR", "./data"))
    csv_env = os.getenv("GROUP_HEALTH_METRICS_CSV")
    metrics_csv = Path(csv_env) if csv_env else data_dir / "daily_metrics.csv"
    settings = Settings(
        data_dir=data_dir,
        metrics_csv=metrics_csv if metrics_csv.exists() else None,
        sample_days=_parse_int("GROUP_HEALTH_SAMPLE_DAYS", 60),
        sample_seed=_parse_int("GROUP_HEALTH_SAMPLE_SEED", 7),
        log_level=(os.getenv("GROUP_HEALTH_LOG_LEVEL") or "INFO").upper(),
        thresholds=load_thresholds_from_env(),
        scoring=load_scoring_config_from_env(),
    )
    if settings.metrics_csv is None:
        LOGGER.info("No metrics CSV at %s, using generated sample data", metrics_csv)
    return settings


def configure_logging(level: str | None = None) -> None:
    name = (level or os.getenv("GROUP_HEALTH_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format="%(levelname)s %(message)s")
