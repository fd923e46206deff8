"""Buffer of samples accumulated between flushes."""

import asyncio

from influx2hny.core.models import Sample


class SampleBuffer:
    """Ordered samples waiting for the next flush.

    Appends and drains both take the same lock, so a forced flush from
    outside the scheduler never interleaves with an in-progress append.
    The lock is created lazily to avoid binding to an event loop at
    construction time.
    """

    def __init__(self) -> None:
        self._samples: list[Sample] = []
        self._lock: asyncio.Lock | None = None

    @property
    def lock(self) -> asyncio.Lock:
        """The lock guarding the buffer contents."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def __len__(self) -> int:
        return len(self._samples)

    async def append(self, sample: Sample) -> int:
        """Append a sample and return the new buffer length."""
        async with self.lock:
            self._samples.append(sample)
            return len(self._samples)

    def take(self) -> list[Sample]:
        """Return the buffered samples and reset the buffer.

        The caller must hold ``lock``.
        """
        samples, self._samples = self._samples, []
        return samples

    async def drain(self) -> list[Sample]:
        """Return the buffered samples and reset the buffer."""
        async with self.lock:
            return self.take()
