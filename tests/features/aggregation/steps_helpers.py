"""Shared context and helpers for aggregation and flushing scenarios."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from influx2hny.adapters.emitters import InMemoryEmitter
from influx2hny.core.models import Event, FieldValue, Sample
from influx2hny.core.scheduler import FlushScheduler
from tests.helpers import SECOND, TS


@dataclass
class AggregationScenarioContext:
    """Shared state between steps in an aggregation scenario."""

    samples: list[Sample] = field(default_factory=list)
    unprefixed_tags: frozenset[str] = frozenset()
    events: list[Event] = field(default_factory=list)
    emitter: InMemoryEmitter = field(default_factory=InMemoryEmitter)
    scheduler: FlushScheduler | None = None


def run_async(coro: Any) -> Any:
    """Run a coroutine synchronously."""
    return asyncio.run(coro)


def parse_pairs(text: str) -> list[tuple[str, str]]:
    """Parse "k=v,k2=v2" into ordered pairs."""
    return [
        (key.strip(), value.strip())
        for key, value in (pair.split("=", 1) for pair in text.split(",") if pair)
    ]


def parse_fields(text: str) -> dict[str, FieldValue]:
    """Parse "k=1,k2=2" into numeric fields."""
    return {key: float(value) for key, value in parse_pairs(text)}


def parse_names(text: str) -> set[str]:
    """Parse a comma-separated list of field names."""
    return {name.strip() for name in text.split(",") if name.strip()}


def make_samples(n: int) -> list[Sample]:
    """Build n samples with distinct timestamps."""
    return [
        Sample(
            name="cpu",
            timestamp=TS + i * SECOND,
            tags=(("host", "a"),),
            fields={"v": 1.0},
        )
        for i in range(n)
    ]
