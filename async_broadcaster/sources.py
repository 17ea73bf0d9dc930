"""Upstream sources that can be handed to an AsyncBroadcaster."""

import asyncio
import itertools
import logging
from collections.abc import AsyncGenerator
from typing import Generic, TypeVar

from .exceptions import SourceClosedError

logger = logging.getLogger(__name__)
T = TypeVar("T")

_CLOSE = object()


class PushSource(Generic[T]):
    """Manually fed, one-shot async iterable.

    ``push()`` returns once the consumer has pulled the value, so the caller
    knows the value has been handed downstream before it continues.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self._iterating = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def push(self, value: T) -> None:
        if self._closed:
            raise SourceClosedError("Cannot push into a closed source")
        await self._queue.put(value)
        await self._queue.join()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSE)

    def __aiter__(self) -> AsyncGenerator[T, None]:
        if self._iterating:
            raise RuntimeError("PushSource can only be iterated once")
        self._iterating = True
        return self._drain()

    async def _drain(self) -> AsyncGenerator[T, None]:
        while True:
            item = await self._queue.get()
            self._queue.task_done()
            if item is _CLOSE:
                return
            yield item  # type: ignore[misc]


async def ticker(interval_sec: float, *, limit: int | None = None, start: int = 0) -> AsyncGenerator[int, None]:
    """Yield consecutive integers, one every ``interval_sec`` seconds."""
    counter = itertools.count(start) if limit is None else range(start, start + limit)
    for value in counter:
        await asyncio.sleep(interval_sec)
        yield value
    logger.debug("Ticker finished after %s values", limit)
