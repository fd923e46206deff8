"""Shared helpers for building samples and input streams in tests."""

import asyncio
from collections.abc import Iterable

from influx2hny.core.models import FieldValue, Sample

# 2023-12-11T13:06:40Z in unix nanoseconds.
TS = 1_702_300_000_000_000_000
SECOND = 1_000_000_000


def make_sample(
    name: str = "cpu",
    tags: Iterable[tuple[str, str]] | dict[str, str] = (("host", "kafka-01"),),
    fields: dict[str, FieldValue] | None = None,
    timestamp: int = TS,
) -> Sample:
    """Build a Sample with sensible defaults."""
    tag_pairs = tuple(tags.items()) if isinstance(tags, dict) else tuple(tags)
    return Sample(
        name=name,
        timestamp=timestamp,
        tags=tag_pairs,
        fields=fields if fields is not None else {"usage_idle": 99.0},
    )


def line_stream(lines: Iterable[str | bytes], eof: bool = True) -> asyncio.StreamReader:
    """Return a StreamReader pre-fed with the given lines.

    Must be called with an event loop running.
    """
    stream = asyncio.StreamReader()
    for line in lines:
        data = line if isinstance(line, bytes) else line.encode()
        stream.feed_data(data if data.endswith(b"\n") else data + b"\n")
    if eof:
        stream.feed_eof()
    return stream
