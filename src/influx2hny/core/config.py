"""Configuration for the output pipeline and the Honeycomb emitter."""

from dataclasses import dataclass, field
from urllib.parse import quote

from influx2hny.core.errors import ConfigError

DEFAULT_FLUSH_INTERVAL = 5.0
DEFAULT_MAX_BUFFER_SIZE = 1000
DEFAULT_DATASET = "telegraf"
DEFAULT_API_HOST = "https://api.honeycomb.io/"
DEFAULT_BATCH_SIZE = 50


@dataclass
class OutputConfig:
    """Settings for buffering and flushing samples.

    Attributes:
        flush_interval: Seconds between timer-triggered flushes.
        max_buffer_size: Buffered sample count that triggers an immediate flush.
        unprefixed_tags: Tag keys sent without the sample-name prefix.
            "host" is always treated as if it were listed here.
        queue_size: Maximum samples waiting between reader and scheduler.
            0 means unbounded.
    """

    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    unprefixed_tags: frozenset[str] = field(default_factory=frozenset)
    queue_size: int = 0

    def __post_init__(self) -> None:
        self.unprefixed_tags = frozenset(self.unprefixed_tags)
        if self.flush_interval <= 0:
            raise ConfigError(
                f"flush_interval must be positive, got {self.flush_interval}"
            )
        if self.max_buffer_size < 1:
            raise ConfigError(
                f"max_buffer_size must be at least 1, got {self.max_buffer_size}"
            )
        if self.queue_size < 0:
            raise ConfigError(f"queue_size must not be negative, got {self.queue_size}")


@dataclass
class HoneycombConfig:
    """Connection settings for the Honeycomb events API.

    Attributes:
        api_key: Honeycomb API key (required).
        dataset: Dataset to send to. Empty falls back to "telegraf".
        api_host: Base URL of the Honeycomb API (required).
        batch_size: Maximum events per batch request.
        timeout: Request timeout in seconds.
    """

    api_key: str = ""
    dataset: str = DEFAULT_DATASET
    api_host: str = DEFAULT_API_HOST
    batch_size: int = DEFAULT_BATCH_SIZE
    timeout: float = 10.0

    def validate(self) -> "HoneycombConfig":
        """Check required settings and apply fallbacks.

        Returns:
            self, for chaining.

        Raises:
            ConfigError: If api_key or api_host is missing, or batch_size
                is not positive.
        """
        if not self.api_key:
            raise ConfigError("api_key is required")
        if not self.api_host:
            raise ConfigError("api_host is required")
        if not self.dataset:
            self.dataset = DEFAULT_DATASET
        if self.batch_size < 1:
            raise ConfigError(f"batch_size must be at least 1, got {self.batch_size}")
        return self

    @property
    def batch_url(self) -> str:
        """URL of the batch endpoint for the configured dataset."""
        return f"{self.api_host.rstrip('/')}/1/batch/{quote(self.dataset, safe='')}"
