from __future__ import annotations

from fractions import Fraction
import math
import re
from typing import Any

from group_health.domain.constants import SCORE_MAX, SCORE_MIN


def normalize_key(value: str | None) -> str:
    if not value:
        return ""
    cleaned = value.replace("\ufeff", "").replace("\u00a0", " ").strip()
    cleaned = re.sub(r"\s+", "_", cleaned)
    return cleaned.casefold()


def to_float(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def round_half_up(value: float | Fraction) -> int:
    """
    Round to the nearest integer, halves away from zero for positives.

    >>> round_half_up(83.5)
    84
    >>> round_half_up(54.26)
    54
    >>> round_half_up(Fraction(45, 2))
    23
    """
    return int(math.floor(value + Fraction(1, 2)))


def clamp_score(value: float) -> float:
    return max(float(SCORE_MIN), min(float(SCORE_MAX), value))
