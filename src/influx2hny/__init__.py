"""influx2hny: forward Influx line protocol metrics to Honeycomb as events."""

import logging

__version__ = "0.1.0"

from influx2hny.adapters.emitters import (  # noqa: E402
    HoneycombEmitter,
    InMemoryEmitter,
    NDJSONEmitter,
)
from influx2hny.adapters.logging import (  # noqa: E402
    DiagnosticHandler,
    enable_debug_logging,
)
from influx2hny.adapters.reader import InfluxReader  # noqa: E402
from influx2hny.core.aggregation import (  # noqa: E402
    FewestEventsAggregator,
    aggregate,
    mergeable,
)
from influx2hny.core.config import HoneycombConfig, OutputConfig  # noqa: E402
from influx2hny.core.encoding.line_protocol import (  # noqa: E402
    LineProtocolParser,
    parse_line,
)
from influx2hny.core.errors import (  # noqa: E402
    ConfigError,
    EmitError,
    EventAddError,
    FatalEmitError,
    Influx2HnyError,
    ParseError,
)
from influx2hny.core.models import Event, Sample  # noqa: E402
from influx2hny.core.projection import project  # noqa: E402
from influx2hny.core.scheduler import FlushScheduler, SchedulerState  # noqa: E402
from influx2hny.output import Output  # noqa: E402

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigError",
    "DiagnosticHandler",
    "EmitError",
    "Event",
    "EventAddError",
    "FatalEmitError",
    "FewestEventsAggregator",
    "FlushScheduler",
    "HoneycombConfig",
    "HoneycombEmitter",
    "InMemoryEmitter",
    "Influx2HnyError",
    "InfluxReader",
    "LineProtocolParser",
    "NDJSONEmitter",
    "Output",
    "OutputConfig",
    "ParseError",
    "Sample",
    "SchedulerState",
    "__version__",
    "aggregate",
    "enable_debug_logging",
    "mergeable",
    "parse_line",
    "project",
]
