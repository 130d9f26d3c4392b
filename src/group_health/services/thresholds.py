from __future__ import annotations

from dataclasses import fields, replace
import logging
import math
import numbers
from typing import Any

from group_health.domain.errors import ConfigurationOutOfRange
from group_health.domain.models import ScoreThresholds

LOGGER = logging.getLogger(__name__)

_DENOMINATOR_FIELDS = ("avg_messages_per_speaker_target", "response_speed_base")
_COUNT_FIELDS = ("cold_start_message_threshold", "micro_group_member_threshold")


def validate_thresholds(thresholds: ScoreThresholds) -> None:
    for item in fields(ScoreThresholds):
        value = getattr(thresholds, item.name)
        if isinstance(value, bool) or not isinstance(value, numbers.Real) or math.isnan(value):
            raise ConfigurationOutOfRange(item.name, value, "must be a number")

    for name in _DENOMINATOR_FIELDS:
        value = getattr(thresholds, name)
        if value <= 0:
            raise ConfigurationOutOfRange(name, value, "must be greater than 0")

    meltdown = thresholds.atmosphere_meltdown_threshold
    if not 0 < meltdown <= 100:
        raise ConfigurationOutOfRange(
            "atmosphere_meltdown_threshold", meltdown, "must be within (0, 100]"
        )

    for name in _COUNT_FIELDS:
        value = getattr(thresholds, name)
        if value < 0:
            raise ConfigurationOutOfRange(name, value, "must be non-negative")


class ThresholdStore:
    """Process-wide holder of the current scoring thresholds.

    Readers take an immutable snapshot with ``get``; updates replace the
    snapshot and bump ``version`` so already produced reports can tell which
    thresholds they were scored under.
    """

    def __init__(self, thresholds: ScoreThresholds | None = None) -> None:
        initial = thresholds or ScoreThresholds()
        validate_thresholds(initial)
        self._current = initial
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def get(self) -> ScoreThresholds:
        return self._current

    def snapshot(self) -> tuple[ScoreThresholds, int]:
        return self._current, self._version

    def update(self, **changes: Any) -> ScoreThresholds:
        known = {item.name for item in fields(ScoreThresholds)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigurationOutOfRange(unknown[0], changes[unknown[0]], "unknown threshold")

        candidate = replace(self._current, **changes)
        try:
            validate_thresholds(candidate)
        except ConfigurationOutOfRange as exc:
            LOGGER.warning("Threshold update rejected, keeping previous values: %s", exc)
            raise

        if candidate == self._current:
            return self._current

        self._current = candidate
        self._version += 1
        LOGGER.info("Thresholds updated to version %s: %s", self._version, changes)
        return candidate

    def reset(self) -> ScoreThresholds:
        return self.update(**ScoreThresholds().to_dict())
