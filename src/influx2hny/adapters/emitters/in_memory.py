"""In-memory emitter."""

from influx2hny.core.errors import EmitError
from influx2hny.core.models import Event


class InMemoryEmitter:
    """In-memory implementation of EmitterPort.

    Keeps every event it is sent. Events become ``flushed`` on flush().
    Suitable for testing and for embedding the aggregator without a
    network.
    """

    def __init__(self) -> None:
        self.pending: list[Event] = []
        self.flushed: list[Event] = []
        self.flush_count = 0

    def send(self, event: Event) -> None:
        """Queue an event."""
        if event.is_empty():
            raise EmitError("won't send empty event")
        self.pending.append(event)

    async def flush(self) -> None:
        """Move queued events to ``flushed``."""
        self.flush_count += 1
        self.flushed.extend(self.pending)
        self.pending = []

    @property
    def events(self) -> list[Event]:
        """All events sent so far, flushed or not."""
        return self.flushed + self.pending
