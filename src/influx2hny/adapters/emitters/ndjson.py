"""Emitter writing events as NDJSON to a text stream."""

import sys
from typing import TextIO

from influx2hny.core.encoding.ndjson import encode_events
from influx2hny.core.errors import EmitError
from influx2hny.core.models import Event


class NDJSONEmitter:
    """EmitterPort implementation that prints events instead of sending them.

    Each flush writes the queued events, one JSON object per line, in the
    same shape the Honeycomb batch API receives. Used for dry runs.

    Args:
        stream: Text stream to write to. Defaults to sys.stdout.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._pending: list[Event] = []

    def send(self, event: Event) -> None:
        """Queue an event for the next flush."""
        if event.is_empty():
            raise EmitError("won't send empty event")
        self._pending.append(event)

    async def flush(self) -> None:
        """Write queued events to the stream."""
        events, self._pending = self._pending, []
        if not events:
            return
        try:
            self._stream.write(encode_events(events))
            self._stream.flush()
        except (OSError, ValueError) as exc:
            raise EmitError(f"failed to write {len(events)} events: {exc}") from exc
