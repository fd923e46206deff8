"""Buffering and flush scheduling.

The scheduler is the only writer of the sample buffer. It waits on three
wake sources at once, a new sample on the intake queue, the periodic flush
timer and the stop signal, and handles whichever is ready first.

A periodic flush can fire before every sample for a timestamp has arrived,
splitting that timestamp across two flushes. Each flush then sends its own
partial flat event for it; that is accepted.
"""

import asyncio
import logging
from enum import Enum
from typing import Any

from influx2hny.core.aggregation import FewestEventsAggregator
from influx2hny.core.buffer import SampleBuffer
from influx2hny.core.config import OutputConfig
from influx2hny.core.errors import EmitError, FatalEmitError
from influx2hny.core.models import Event, Sample
from influx2hny.core.observers import notify
from influx2hny.core.ports import EmitterPort, ErrorObserver

logger = logging.getLogger("influx2hny.output")

# Put on the intake queue by the producer after its last sample.
END_OF_STREAM: Any = object()


class SchedulerState(Enum):
    """Lifecycle of a FlushScheduler."""

    IDLE = "idle"
    ACCUMULATING = "accumulating"
    FLUSHING = "flushing"
    STOPPED = "stopped"


class FlushScheduler:
    """Accumulates samples and flushes them as events.

    A flush is triggered when the buffer reaches ``max_buffer_size``, when
    the periodic timer fires, and once more when the scheduler stops.
    The timer keeps its own cadence; size-triggered flushes do not reset it.
    """

    def __init__(
        self,
        emitter: EmitterPort,
        config: OutputConfig | None = None,
        aggregator: FewestEventsAggregator | None = None,
        on_error: ErrorObserver | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            emitter: Where events are sent. Owned by the caller.
            config: Buffering settings. Defaults to OutputConfig().
            aggregator: Groups samples into events. Defaults to a
                FewestEventsAggregator using config.unprefixed_tags.
            on_error: Called with every non-fatal error. Defaults to logging.
        """
        self.config = config or OutputConfig()
        self.emitter = emitter
        self.on_error = on_error
        self.aggregator = aggregator or FewestEventsAggregator(
            self.config.unprefixed_tags, on_error
        )
        self.buffer = SampleBuffer()
        self.state = SchedulerState.IDLE
        self._stop_event: asyncio.Event | None = None

    @property
    def stop_event(self) -> asyncio.Event:
        """The stop signal shared with the producer."""
        if self._stop_event is None:
            self._stop_event = asyncio.Event()
        return self._stop_event

    def stop(self) -> None:
        """Request a final flush and stop."""
        self.stop_event.set()

    async def add(self, sample: Sample) -> None:
        """Buffer a sample, flushing immediately if the buffer is full.

        Raises:
            RuntimeError: If the scheduler has stopped.
        """
        if self.state is SchedulerState.STOPPED:
            raise RuntimeError("scheduler is stopped")
        size = await self.buffer.append(sample)
        if self.state is SchedulerState.IDLE:
            self.state = SchedulerState.ACCUMULATING
        if size >= self.config.max_buffer_size:
            await self.flush(reason="buffer full")

    async def flush(self, reason: str = "forced") -> int:
        """Aggregate and send everything buffered, then flush the emitter.

        Safe to call at any time, from inside or outside the run loop,
        including with an empty buffer. The buffer is empty afterwards
        whether or not sending succeeded.

        Returns:
            Number of events handed to the emitter.

        Raises:
            FatalEmitError: If the emitter flush reports a fatal error.
        """
        async with self.buffer.lock:
            samples = self.buffer.take()
            if self.state is not SchedulerState.STOPPED:
                self.state = SchedulerState.FLUSHING
            try:
                sent = await self._emit(self.aggregator.aggregate(samples))
            finally:
                if self.state is SchedulerState.FLUSHING:
                    self.state = SchedulerState.IDLE
        logger.debug(
            "flushed %d samples as %d events (%s)", len(samples), sent, reason
        )
        return sent

    async def _emit(self, events: list[Event]) -> int:
        sent = 0
        for event in events:
            # Honeycomb rejects events without fields.
            if event.is_empty():
                logger.debug("skipping empty event at %s", event.timestamp)
                continue
            try:
                self.emitter.send(event)
                sent += 1
            except EmitError as exc:
                notify(self.on_error, exc, logger)

        try:
            await self.emitter.flush()
        except FatalEmitError:
            raise
        except EmitError as exc:
            notify(self.on_error, exc, logger)
        return sent

    async def run(self, queue: "asyncio.Queue[Sample]") -> None:
        """Consume the intake queue until stopped or END_OF_STREAM arrives.

        Performs exactly one final flush on the way out, then the scheduler
        is STOPPED and the stop signal is set.

        Raises:
            RuntimeError: If the scheduler has already stopped.
            FatalEmitError: If the emitter reports a fatal error.
        """
        if self.state is SchedulerState.STOPPED:
            raise RuntimeError("scheduler is stopped")
        try:
            await self._loop(queue)
            await self._drain(queue)
            await self.flush(reason="stop")
        finally:
            self.state = SchedulerState.STOPPED
            self.stop_event.set()

    async def _loop(self, queue: "asyncio.Queue[Sample]") -> None:
        loop = asyncio.get_running_loop()
        interval = self.config.flush_interval
        next_tick = loop.time() + interval
        stopped = asyncio.ensure_future(self.stop_event.wait())
        getter: asyncio.Future[Any] | None = None
        try:
            while True:
                if getter is None:
                    getter = asyncio.ensure_future(queue.get())
                timeout = max(0.0, next_tick - loop.time())
                done, _ = await asyncio.wait(
                    {getter, stopped},
                    timeout=timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if getter in done:
                    item = getter.result()
                    getter = None
                    if item is END_OF_STREAM:
                        logger.debug("end of input")
                        return
                    await self.add(item)

                if stopped in done:
                    logger.debug("stop requested")
                    return

                now = loop.time()
                if now >= next_tick:
                    await self.flush(reason="interval")
                    while next_tick <= now:
                        next_tick += interval
        finally:
            stopped.cancel()
            if getter is not None:
                getter.cancel()

    async def _drain(self, queue: "asyncio.Queue[Sample]") -> None:
        """Move samples already waiting on the queue into the buffer."""
        while True:
            try:
                item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            if item is not END_OF_STREAM:
                await self.buffer.append(item)
