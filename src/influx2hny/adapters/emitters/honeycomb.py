"""Emitter for the Honeycomb batch events API.

Events are queued by send() and posted on flush() to
``{api_host}/1/batch/{dataset}``, at most ``batch_size`` per request.
The response carries one status per event in request order.
"""

import logging
from typing import Any

import httpx

from influx2hny import __version__
from influx2hny.core.config import HoneycombConfig
from influx2hny.core.encoding.ndjson import event_to_dict
from influx2hny.core.errors import EmitError, FatalEmitError
from influx2hny.core.models import Event

logger = logging.getLogger("influx2hny.emitters.honeycomb")

# Statuses meaning the API key will never work.
_FATAL_STATUSES = frozenset({401, 403})


class HoneycombEmitter:
    """EmitterPort implementation sending events to Honeycomb over HTTP.

    Example:
        ```python
        config = HoneycombConfig(api_key="...", dataset="telegraf")
        async with HoneycombEmitter(config) as emitter:
            emitter.send(event)
            await emitter.flush()
        ```
    """

    def __init__(
        self,
        config: HoneycombConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the emitter.

        Args:
            config: Connection settings. Validated here.
            client: HTTP client to use. When omitted the emitter creates one
                and closes it in aclose(); a passed-in client is left open.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        self.config = config.validate()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._pending: list[Event] = []

    @property
    def headers(self) -> dict[str, str]:
        """Request headers for the batch endpoint."""
        return {
            "X-Honeycomb-Team": self.config.api_key,
            "Content-Type": "application/json",
            "User-Agent": f"influx2hny/{__version__}",
        }

    def send(self, event: Event) -> None:
        """Queue an event for the next flush.

        Raises:
            EmitError: If the event has no fields.
        """
        if event.is_empty():
            raise EmitError("won't send empty event")
        self._pending.append(event)

    async def flush(self) -> None:
        """Post all queued events.

        Every batch is attempted even if an earlier one failed; the first
        failure is raised once all batches are done.

        Raises:
            EmitError: If a batch or some of its events were rejected.
            FatalEmitError: If Honeycomb refused the API key.
        """
        events, self._pending = self._pending, []
        size = self.config.batch_size
        errors: list[EmitError] = []
        for start in range(0, len(events), size):
            try:
                await self._post(events[start : start + size])
            except FatalEmitError:
                raise
            except EmitError as exc:
                errors.append(exc)
        if errors:
            if len(errors) > 1:
                logger.debug("%d batches failed", len(errors))
            raise errors[0]

    async def _post(self, batch: list[Event]) -> None:
        payload = [event_to_dict(event) for event in batch]
        try:
            response = await self._client.post(
                self.config.batch_url, json=payload, headers=self.headers
            )
        except httpx.HTTPError as exc:
            raise EmitError(f"failed to send {len(batch)} events: {exc}") from exc

        if response.status_code in _FATAL_STATUSES:
            raise FatalEmitError(
                f"Honeycomb rejected the API key ({response.status_code}): "
                f"{response.text.strip()}"
            )
        if response.is_error:
            raise EmitError(
                f"Honeycomb returned {response.status_code} for "
                f"{len(batch)} events: {response.text.strip()}"
            )
        self._check_statuses(response, len(batch))
        logger.debug("sent %d events", len(batch))

    def _check_statuses(self, response: httpx.Response, expected: int) -> None:
        """Raise EmitError if any event in the batch was rejected."""
        try:
            statuses: Any = response.json()
        except ValueError as exc:
            raise EmitError(f"unreadable batch response: {exc}") from exc

        if not isinstance(statuses, list) or not all(
            isinstance(s, dict) and isinstance(s.get("status"), int)
            for s in statuses
        ):
            raise EmitError(
                f"unreadable batch response: expected a list of statuses, "
                f"got {response.text.strip()[:200]!r}"
            )

        rejected = [s for s in statuses if not 200 <= s["status"] < 300]
        if len(statuses) != expected:
            logger.debug("expected %d statuses, got %d", expected, len(statuses))
        if rejected:
            first = rejected[0].get("error", "unknown error")
            raise EmitError(f"{len(rejected)} of {expected} events rejected: {first}")

    async def aclose(self) -> None:
        """Close the HTTP client if this emitter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HoneycombEmitter":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
