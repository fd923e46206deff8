"""The complete pipeline: read, buffer, aggregate, emit."""

import asyncio
import logging

from influx2hny.adapters.reader import InfluxReader
from influx2hny.core.config import OutputConfig
from influx2hny.core.handoff import put_until_stopped
from influx2hny.core.models import Sample
from influx2hny.core.ports import EmitterPort, ErrorObserver, LineParserPort, LineSource
from influx2hny.core.scheduler import END_OF_STREAM, FlushScheduler, SchedulerState

logger = logging.getLogger("influx2hny.output")


class Output:
    """Reads line protocol from a stream and sends it on as events.

    Example:
        ```python
        emitter = HoneycombEmitter(HoneycombConfig(api_key="..."))
        output = Output(emitter, OutputConfig(unprefixed_tags={"role"}))
        await output.process(stream)
        ```
    """

    def __init__(
        self,
        emitter: EmitterPort,
        config: OutputConfig | None = None,
        parser: LineParserPort | None = None,
        on_error: ErrorObserver | None = None,
    ) -> None:
        """Initialize the output.

        Args:
            emitter: Where events are sent. Owned and closed by the caller.
            config: Buffering and naming settings.
            parser: Line decoder. Defaults to LineProtocolParser.
            on_error: Called with every non-fatal error (parse, field and
                emit errors). Defaults to logging.
        """
        self.config = config or OutputConfig()
        self.reader = InfluxReader(parser, on_parse_error=on_error)
        self.scheduler = FlushScheduler(emitter, self.config, on_error=on_error)

    @property
    def state(self) -> SchedulerState:
        """Current scheduler state."""
        return self.scheduler.state

    def stop(self) -> None:
        """Stop processing after one final flush."""
        self.scheduler.stop()

    async def flush(self) -> int:
        """Force a flush of whatever is buffered right now."""
        return await self.scheduler.flush()

    async def process(self, stream: LineSource) -> None:
        """Run the reader and the flush scheduler until EOF or stop().

        Raises:
            OSError: If reading the stream fails for a reason other than
                end of stream.
            FatalEmitError: If the emitter reports a fatal error.
        """
        queue: asyncio.Queue[Sample] = asyncio.Queue(maxsize=self.config.queue_size)
        stop = self.scheduler.stop_event
        reader = asyncio.create_task(self._read(stream, queue, stop))

        try:
            await self.scheduler.run(queue)
        except BaseException:
            reader.cancel()
            await asyncio.wait([reader])
            if not reader.cancelled() and reader.exception() is not None:
                logger.debug("reader also failed: %r", reader.exception())
            raise

        # The reader may still be waiting for a line nobody will consume.
        if not reader.done():
            reader.cancel()
        await asyncio.wait([reader])
        if not reader.cancelled():
            reader.result()

    async def _read(
        self, stream: LineSource, queue: "asyncio.Queue[Sample]", stop: asyncio.Event
    ) -> None:
        try:
            count = await self.reader.read(stream, queue, stop)
        except BaseException:
            stop.set()
            raise
        logger.debug("reader finished after %d samples", count)
        await put_until_stopped(queue, END_OF_STREAM, stop)
