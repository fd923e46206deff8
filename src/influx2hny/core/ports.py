"""Port interfaces for the pipeline's collaborators.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from influx2hny.core.models import Event, Sample

ErrorObserver = Callable[[Exception], None]


@runtime_checkable
class EmitterPort(Protocol):
    """Port for delivering events to a remote service.

    Examples: HoneycombEmitter, NDJSONEmitter, InMemoryEmitter.
    """

    def send(self, event: Event) -> None:
        """Queue an event for delivery.

        Raises:
            EmitError: If the event cannot be accepted.
        """
        ...

    async def flush(self) -> None:
        """Deliver everything queued so far.

        Raises:
            EmitError: If delivery failed. FatalEmitError if the pipeline
                should stop.
        """
        ...


@runtime_checkable
class LineParserPort(Protocol):
    """Port for decoding one line of text into a Sample."""

    def parse_line(self, line: str) -> Sample:
        """Decode a line.

        Raises:
            ParseError: If the line is not valid.
        """
        ...


@runtime_checkable
class LineSource(Protocol):
    """A byte stream read one newline-terminated record at a time.

    asyncio.StreamReader satisfies this protocol.
    """

    async def readline(self) -> bytes:
        """Return the next line, or b"" at end of stream."""
        ...
