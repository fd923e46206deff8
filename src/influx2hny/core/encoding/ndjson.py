"""NDJSON encoders for events and diagnostic log entries."""

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from influx2hny.core.models import Event, LogEntry

NANOS_PER_SECOND = 1_000_000_000


def format_time(timestamp: int) -> str:
    """Format unix nanoseconds as an RFC 3339 string in UTC.

    Sub-second digits are kept to the nanosecond, without trailing zeros.
    """
    seconds, nanos = divmod(timestamp, NANOS_PER_SECOND)
    text = datetime.fromtimestamp(seconds, tz=UTC).isoformat()
    if not nanos:
        return text
    fraction = f"{nanos:09d}".rstrip("0")
    return f"{text[:-6]}.{fraction}{text[-6:]}"


def event_to_dict(event: Event) -> dict[str, Any]:
    """Return the Honeycomb batch-API representation of an event."""
    return {"time": format_time(event.timestamp), "data": dict(event.fields)}


def _join(lines: list[str]) -> str:
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def encode_events(events: Iterable[Event]) -> str:
    """Encode events to newline-delimited JSON.

    Args:
        events: An iterable of Event objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no events.
    """
    return _join([json.dumps(event_to_dict(event)) for event in events])


def encode_logs(entries: Iterable[LogEntry]) -> str:
    """Encode log entries to newline-delimited JSON.

    Args:
        entries: An iterable of LogEntry objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no entries.
    """
    lines = []
    for entry in entries:
        obj = {
            "timestamp": entry.timestamp,
            "level": entry.level,
            "message": entry.message,
            "attributes": entry.attributes,
        }
        lines.append(json.dumps(obj, default=str))
    return _join(lines)
