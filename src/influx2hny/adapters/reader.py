"""Reader turning a line-oriented byte stream into Samples."""

import asyncio
import logging

from influx2hny.core.encoding.line_protocol import LineProtocolParser
from influx2hny.core.errors import ParseError
from influx2hny.core.handoff import put_until_stopped
from influx2hny.core.models import Sample
from influx2hny.core.observers import notify
from influx2hny.core.ports import ErrorObserver, LineParserPort, LineSource

logger = logging.getLogger("influx2hny.reader")


class InfluxReader:
    """Reads Influx line protocol records and forwards decoded Samples.

    Args:
        parser: Decodes lines into Samples. Defaults to LineProtocolParser
            with nanosecond precision.
        on_parse_error: Called with each ParseError. Defaults to logging.
            Could also be used to set the stop signal and end reading.
    """

    def __init__(
        self,
        parser: LineParserPort | None = None,
        on_parse_error: ErrorObserver | None = None,
    ) -> None:
        self.parser = parser or LineProtocolParser()
        self.on_parse_error = on_parse_error

    def decode(self, raw: bytes) -> Sample | None:
        """Decode one raw line.

        Returns:
            The Sample, or None for blank lines, comments and lines that
            failed to decode (those are reported to on_parse_error).
        """
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            notify(self.on_parse_error, ParseError(f"invalid utf-8: {exc}"), logger)
            return None

        text = text.strip()
        if not text or text.startswith("#"):
            return None
        try:
            return self.parser.parse_line(text)
        except ParseError as exc:
            notify(self.on_parse_error, exc, logger)
            return None

    async def read(
        self,
        stream: LineSource,
        out: "asyncio.Queue[Sample]",
        stop: asyncio.Event | None = None,
    ) -> int:
        """Read lines until end of stream or the stop signal.

        Each decoded Sample is put on ``out``. A hand-off blocked on a full
        queue gives up as soon as ``stop`` is set.

        Returns:
            Number of samples handed off.

        Raises:
            OSError: If reading the stream fails. Also anything else the
                stream raises, such as ValueError on an over-long line.
        """
        stop = stop or asyncio.Event()
        count = 0
        while not stop.is_set():
            raw = await stream.readline()
            if not raw:
                logger.debug("end of stream after %d samples", count)
                break
            sample = self.decode(raw)
            if sample is None:
                continue
            if not await put_until_stopped(out, sample, stop):
                logger.debug("stopped while handing off a sample")
                break
            count += 1
        return count
