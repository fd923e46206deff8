"""Exception types raised and reported by influx2hny.

Only ConfigError, FatalEmitError and reader I/O errors ever propagate out of
a running pipeline. Everything else is reported to an error observer and the
pipeline moves on.
"""


class Influx2HnyError(Exception):
    """Base class for all influx2hny errors."""


class ConfigError(Influx2HnyError):
    """Invalid configuration."""


class ParseError(Influx2HnyError):
    """A line of input could not be decoded into a Sample.

    Attributes:
        line: The offending input line.
    """

    def __init__(self, message: str, line: str = "") -> None:
        super().__init__(message)
        self.line = line


class EventAddError(Influx2HnyError):
    """A single field could not be added to an Event.

    Attributes:
        key: The field key that was rejected.
    """

    def __init__(self, message: str, key: str = "") -> None:
        super().__init__(message)
        self.key = key


class EmitError(Influx2HnyError):
    """An event could not be sent, or an emitter flush failed."""


class FatalEmitError(EmitError):
    """An emitter failure that should stop the pipeline."""
