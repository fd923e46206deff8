"""Cancellable hand-off between the reader and the flush scheduler."""

import asyncio
from typing import TypeVar

T = TypeVar("T")


async def put_until_stopped(
    queue: "asyncio.Queue[T]", item: T, stop: asyncio.Event
) -> bool:
    """Put an item on the queue unless the stop signal fires first.

    A full queue would otherwise block the producer forever once the
    consumer has stopped draining it.

    Returns:
        True if the item was enqueued, False if stop was observed first.
    """
    if stop.is_set():
        return False
    try:
        queue.put_nowait(item)
        return True
    except asyncio.QueueFull:
        pass

    put = asyncio.ensure_future(queue.put(item))
    stopped = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({put, stopped}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stopped.cancel()
        if not put.done():
            put.cancel()
        # Both helpers are finished when this returns.
        await asyncio.wait({put, stopped})
    return not put.cancelled()
