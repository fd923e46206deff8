"""Unit tests for the DiagnosticHandler logging adapter."""

import io
import json
import logging
from collections.abc import Iterator
from typing import Any

import pytest

from influx2hny.adapters.logging import (
    PACKAGE_LOGGER,
    DiagnosticHandler,
    enable_debug_logging,
)


def _lines(stream: io.StringIO) -> list[dict[str, Any]]:
    """Parse every NDJSON line written to the stream."""
    return [json.loads(line) for line in stream.getvalue().splitlines()]


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    """The package logger, with handlers and level restored afterwards."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.mark.core
class TestDiagnosticHandler:
    """Tests for DiagnosticHandler."""

    def test_handler_is_logging_handler(self) -> None:
        """Handler extends logging.Handler."""
        assert isinstance(DiagnosticHandler(io.StringIO()), logging.Handler)

    def test_emit_writes_one_json_line(self) -> None:
        """Each record becomes one NDJSON line."""
        stream = io.StringIO()
        handler = DiagnosticHandler(stream)

        record = logging.LogRecord(
            name="influx2hny.output",
            level=logging.INFO,
            pathname="",
            lineno=12,
            msg="flushed %d samples",
            args=(3,),
            exc_info=None,
            func="flush",
        )
        handler.emit(record)

        (line,) = _lines(stream)
        assert line["level"] == "INFO"
        assert line["message"] == "flushed 3 samples"
        assert line["attributes"]["component"] == "influx2hny.output"
        assert line["attributes"]["funcName"] == "flush"
        assert line["attributes"]["lineno"] == 12

    def test_includes_extra_attributes(self) -> None:
        """Handler includes extra dict from logging call."""
        stream = io.StringIO()
        logger = logging.getLogger("test_extra")
        logger.handlers.clear()
        logger.addHandler(DiagnosticHandler(stream))
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        logger.info("batch sent", extra={"events": 42, "dataset": "telegraf"})

        (line,) = _lines(stream)
        assert line["attributes"]["events"] == 42
        assert line["attributes"]["dataset"] == "telegraf"

    def test_extracts_exception_info(self) -> None:
        """Handler records exception type, message and traceback."""
        stream = io.StringIO()
        logger = logging.getLogger("test_exception")
        logger.handlers.clear()
        logger.addHandler(DiagnosticHandler(stream))
        logger.propagate = False

        try:
            raise ValueError("bad field")
        except ValueError:
            logger.exception("aggregation failed")

        (line,) = _lines(stream)
        assert line["level"] == "ERROR"
        assert line["attributes"]["exc_type"] == "ValueError"
        assert line["attributes"]["exc_message"] == "bad field"
        assert "Traceback" in line["attributes"]["exc_traceback"]


@pytest.mark.core
class TestEnableDebugLogging:
    """Tests for enable_debug_logging()."""

    def test_package_logger_is_silent_by_default(self) -> None:
        """The package logger carries a NullHandler out of the box."""
        import influx2hny  # noqa: F401

        handlers = logging.getLogger(PACKAGE_LOGGER).handlers
        assert any(isinstance(h, logging.NullHandler) for h in handlers)

    def test_component_loggers_reach_the_stream(
        self, package_logger: logging.Logger
    ) -> None:
        """Debug records from any component logger are written."""
        stream = io.StringIO()
        handler = enable_debug_logging(stream)

        logging.getLogger("influx2hny.reader").debug("end of stream")

        assert handler in package_logger.handlers
        (line,) = _lines(stream)
        assert line["level"] == "DEBUG"
        assert line["attributes"]["component"] == "influx2hny.reader"
