"""Core domain models for metric samples and outgoing events."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from influx2hny.core.errors import EventAddError

FieldValue = str | int | float | bool


@dataclass(frozen=True)
class Sample:
    """A single decoded metric measurement.

    Attributes:
        name: Measurement name (e.g., cpu, disk).
        timestamp: Unix timestamp in integer nanoseconds.
        tags: Ordered (key, value) pairs. Order is significant when
              samples are compared for mergeability.
        fields: Read-only field key to value mapping. Not part of the hash.
    """

    name: str
    timestamp: int
    tags: tuple[tuple[str, str], ...] = ()
    fields: Mapping[str, FieldValue] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


@dataclass(frozen=True)
class LogEntry:
    """A structured diagnostic log line.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)


@dataclass
class Event:
    """One outgoing telemetry record: a timestamp and a flat field mapping.

    Attributes:
        timestamp: Unix timestamp in integer nanoseconds.
        fields: Honeycomb field name to value mapping.
    """

    timestamp: int
    fields: dict[str, FieldValue] = field(default_factory=dict)

    def add_field(self, key: str, value: object) -> None:
        """Add a single field, replacing any existing value for the key.

        Raises:
            EventAddError: If the key is not a non-empty string or the value
                is not a JSON-safe scalar.
        """
        if not isinstance(key, str) or not key:
            raise EventAddError(f"invalid field key {key!r}", key=str(key))
        if not isinstance(value, (str, int, float, bool)):
            raise EventAddError(
                f"field {key!r} has unsupported type {type(value).__name__}",
                key=key,
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise EventAddError(f"field {key!r} is not finite: {value}", key=key)
        self.fields[key] = value

    def is_empty(self) -> bool:
        """Return True if no fields have been added."""
        return not self.fields
