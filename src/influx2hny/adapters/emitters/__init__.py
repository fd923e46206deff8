"""Emitter adapters implementing EmitterPort."""

from influx2hny.adapters.emitters.honeycomb import HoneycombEmitter
from influx2hny.adapters.emitters.in_memory import InMemoryEmitter
from influx2hny.adapters.emitters.ndjson import NDJSONEmitter

__all__ = [
    "HoneycombEmitter",
    "InMemoryEmitter",
    "NDJSONEmitter",
]
