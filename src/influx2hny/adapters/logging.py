"""Diagnostic log sink.

Bridges the standard library logging module to line-oriented structured
output: each record becomes one NDJSON line tagged with the component
(logger name) that produced it. The package logger carries only a
NullHandler until enable_debug_logging() is called.
"""

import logging
import sys
import traceback
from typing import TextIO

from influx2hny.core.encoding.ndjson import encode_logs
from influx2hny.core.models import LogEntry

PACKAGE_LOGGER = "influx2hny"

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class DiagnosticHandler(logging.Handler):
    """Logging handler writing each record as one NDJSON line.

    Example:
        ```python
        handler = DiagnosticHandler(sys.stderr)
        logging.getLogger("influx2hny").addHandler(handler)
        ```
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the handler.

        Args:
            stream: Text stream to write to. Defaults to sys.stdout.
        """
        super().__init__()
        self.stream = stream or sys.stdout

    def to_entry(self, record: logging.LogRecord) -> LogEntry:
        """Convert a log record into a LogEntry."""
        attributes: dict[str, str | int | float | bool] = {
            "component": record.name,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
        }

        # Add any extra attributes passed via logging call
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                attributes[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                attributes["exc_type"] = exc_type.__name__
            if exc_value is not None:
                attributes["exc_message"] = str(exc_value)
            if exc_tb is not None:
                attributes["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        return LogEntry(
            timestamp=record.created,
            level=record.levelname,
            message=record.getMessage(),
            attributes=attributes,
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Write a log record to the stream."""
        try:
            self.stream.write(encode_logs([self.to_entry(record)]))
            self.stream.flush()
        except Exception:
            self.handleError(record)


def enable_debug_logging(stream: TextIO | None = None) -> DiagnosticHandler:
    """Send all influx2hny diagnostics at DEBUG and above to a stream.

    Returns:
        The installed handler, so callers can remove it again.
    """
    handler = DiagnosticHandler(stream)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return handler
