from __future__ import annotations

from collections.abc import Iterable
import logging

from group_health.domain.constants import MODE_ALL, MODE_EXCLUDE, MODE_INCLUDE, SCORING_MODES
from group_health.domain.errors import ConfigurationOutOfRange
from group_health.domain.models import GroupScoringConfig

LOGGER = logging.getLogger(__name__)


def should_score(group_id: str, config: GroupScoringConfig) -> bool:
    if config.mode == MODE_ALL:
        return True
    if config.mode == MODE_INCLUDE:
        return group_id in config.group_ids
    if config.mode == MODE_EXCLUDE:
        return group_id not in config.group_ids
    raise ConfigurationOutOfRange("mode", config.mode, f"expected one of {', '.join(SCORING_MODES)}")


def make_scoring_config(mode: str, group_ids: Iterable[str] = ()) -> GroupScoringConfig:
    normalized_mode = (mode or "").strip().lower()
    if normalized_mode not in SCORING_MODES:
        raise ConfigurationOutOfRange("mode", mode, f"expected one of {', '.join(SCORING_MODES)}")
    ids = frozenset(str(group_id).strip() for group_id in group_ids if str(group_id).strip())
    return GroupScoringConfig(mode=normalized_mode, group_ids=ids)


class ScoringConfigStore:
    def __init__(self, config: GroupScoringConfig | None = None) -> None:
        initial = config or GroupScoringConfig()
        self._config = make_scoring_config(initial.mode, initial.group_ids)

    def get(self) -> GroupScoringConfig:
        return self._config

    def set(self, mode: str, group_ids: Iterable[str] = ()) -> GroupScoringConfig:
        self._config = make_scoring_config(mode, group_ids)
        LOGGER.info(
            "Scoring participation set to %s (%d groups)",
            self._config.mode,
            len(self._config.group_ids),
        )
        return self._config

    def set_mode(self, mode: str) -> GroupScoringConfig:
        return self.set(mode, self._config.group_ids)

    def set_group_ids(self, group_ids: Iterable[str]) -> GroupScoringConfig:
        return self.set(self._config.mode, group_ids)

    def include(self, group_ids: Iterable[str]) -> GroupScoringConfig:
        return self.set(MODE_INCLUDE, group_ids)

    def exclude(self, group_ids: Iterable[str]) -> GroupScoringConfig:
        return self.set(MODE_EXCLUDE, group_ids)

    def excluded_groups(self, group_ids: Iterable[str]) -> list[str]:
        return [group_id for group_id in group_ids if not should_score(group_id, self._config)]
