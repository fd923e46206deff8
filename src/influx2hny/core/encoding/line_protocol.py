"""Decoder for InfluxDB line protocol.

A line looks like::

    measurement[,tag=value...] field=value[,field=value...] [timestamp]

Decoded tags are sorted by key so that samples produced here always carry
their tags in one stable order.
"""

import re
import time
from collections.abc import Callable

from influx2hny.core.errors import ConfigError, ParseError
from influx2hny.core.models import FieldValue, Sample

_MEASUREMENT_ESCAPES = frozenset(", \\")
_KEY_ESCAPES = frozenset(",= \\")
_STRING_ESCAPES = frozenset('"\\')

_INT_RE = re.compile(r"[+-]?\d+")
_UINT_RE = re.compile(r"\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_TRUE = frozenset({"t", "T", "true", "True", "TRUE"})
_FALSE = frozenset({"f", "F", "false", "False", "FALSE"})

# Nanoseconds per unit of each timestamp precision.
PRECISIONS = {"ns": 1, "us": 1_000, "ms": 1_000_000, "s": 1_000_000_000}


def _scan(line: str, pos: int, stops: str, escapes: frozenset[str]) -> tuple[str, int]:
    """Read an unescaped token starting at pos, up to the first stop char."""
    out: list[str] = []
    n = len(line)
    while pos < n:
        ch = line[pos]
        if ch == "\\" and pos + 1 < n and line[pos + 1] in escapes:
            out.append(line[pos + 1])
            pos += 2
            continue
        if ch in stops:
            break
        out.append(ch)
        pos += 1
    return "".join(out), pos


def _skip_spaces(line: str, pos: int) -> int:
    while pos < len(line) and line[pos] == " ":
        pos += 1
    return pos


def _parse_string(line: str, pos: int) -> tuple[str, int]:
    """Read a double-quoted string value; pos points at the opening quote."""
    out: list[str] = []
    pos += 1
    n = len(line)
    while pos < n:
        ch = line[pos]
        if ch == "\\" and pos + 1 < n and line[pos + 1] in _STRING_ESCAPES:
            out.append(line[pos + 1])
            pos += 2
            continue
        if ch == '"':
            return "".join(out), pos + 1
        out.append(ch)
        pos += 1
    raise ParseError("unterminated string field value", line)


def _convert(raw: str, line: str) -> FieldValue:
    """Convert an unquoted field value to int, bool or float."""
    if raw.endswith("i") and _INT_RE.fullmatch(raw[:-1]):
        return int(raw[:-1])
    if raw.endswith("u") and _UINT_RE.fullmatch(raw[:-1]):
        return int(raw[:-1])
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    if _FLOAT_RE.fullmatch(raw):
        return float(raw)
    raise ParseError(f"invalid field value {raw!r}", line)


def parse_line(
    line: str,
    *,
    precision: str = "ns",
    now: Callable[[], int] = time.time_ns,
) -> Sample:
    """Decode one line of line protocol into a Sample.

    Args:
        line: The text to decode, without its trailing newline.
        precision: Unit of the trailing timestamp: "ns", "us", "ms" or "s".
        now: Clock returning unix nanoseconds, used when the line carries no
            timestamp.

    Returns:
        The decoded Sample.

    Raises:
        ParseError: If the line is not valid line protocol.
    """
    try:
        scale = PRECISIONS[precision]
    except KeyError:
        raise ParseError(f"unknown precision {precision!r}", line) from None

    line = line.rstrip("\r\n")
    n = len(line)
    pos = _skip_spaces(line, 0)

    name, pos = _scan(line, pos, ", ", _MEASUREMENT_ESCAPES)
    if not name:
        raise ParseError("missing measurement", line)

    tags: dict[str, str] = {}
    while pos < n and line[pos] == ",":
        key, pos = _scan(line, pos + 1, ",= ", _KEY_ESCAPES)
        if not key or pos >= n or line[pos] != "=":
            raise ParseError("invalid tag", line)
        value, pos = _scan(line, pos + 1, ",= ", _KEY_ESCAPES)
        if not value or (pos < n and line[pos] == "="):
            raise ParseError(f"invalid value for tag {key!r}", line)
        if key in tags:
            raise ParseError(f"duplicate tag {key!r}", line)
        tags[key] = value

    if pos >= n or line[pos] != " ":
        raise ParseError("missing fields", line)
    pos = _skip_spaces(line, pos)

    fields: dict[str, FieldValue] = {}
    while True:
        key, pos = _scan(line, pos, ",= ", _KEY_ESCAPES)
        if not key or pos >= n or line[pos] != "=":
            raise ParseError("invalid field", line)
        pos += 1
        if pos < n and line[pos] == '"':
            value, pos = _parse_string(line, pos)
        else:
            raw, pos = _scan(line, pos, ", ", frozenset())
            if not raw:
                raise ParseError(f"missing value for field {key!r}", line)
            value = _convert(raw, line)
        fields[key] = value
        if pos < n and line[pos] == ",":
            pos += 1
            continue
        break

    if pos < n and line[pos] != " ":
        raise ParseError("unexpected character after fields", line)

    raw_ts = line[pos:].strip()
    if not raw_ts:
        timestamp = now()
    elif _INT_RE.fullmatch(raw_ts):
        timestamp = int(raw_ts) * scale
    else:
        raise ParseError(f"invalid timestamp {raw_ts!r}", line)

    return Sample(
        name=name,
        timestamp=timestamp,
        tags=tuple(sorted(tags.items())),
        fields=fields,
    )


class LineProtocolParser:
    """LineParserPort implementation for InfluxDB line protocol.

    Args:
        precision: Unit of incoming timestamps (default "ns").
        now: Clock used for lines without a timestamp.
    """

    def __init__(
        self, precision: str = "ns", now: Callable[[], int] = time.time_ns
    ) -> None:
        if precision not in PRECISIONS:
            raise ConfigError(f"unknown precision {precision!r}")
        self.precision = precision
        self._now = now

    def parse_line(self, line: str) -> Sample:
        """Decode one line into a Sample."""
        return parse_line(line, precision=self.precision, now=self._now)
