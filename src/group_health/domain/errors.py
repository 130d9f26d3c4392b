from __future__ import annotations


class GroupHealthError(ValueError):
    """Base class for scoring and reporting errors."""


class InvalidMetric(GroupHealthError):
    """Raised when daily metrics or semantic inputs fail validation."""

    def __init__(self, field: str, value: object, reason: str = "must be non-negative") -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid metric {field}={value!r}: {reason}")


class UnknownGroup(GroupHealthError):
    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"Unknown group: {group_id}")


class ConfigurationOutOfRange(GroupHealthError):
    """Raised when a threshold or scoring config value is rejected.

    The previously valid configuration stays in effect.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Configuration {field}={value!r} rejected: {reason}")
