"""Multicast adapter that lets many listeners pull from one async iterable."""

import asyncio
import contextlib
import itertools
import logging
from collections.abc import AsyncGenerator, AsyncIterable
from typing import Generic, TypeVar

from .cancellation import CancellationToken

logger = logging.getLogger(__name__)
T = TypeVar("T")


class BroadcastIterable(Generic[T]):
    """Factory for listener sequences; usable directly in ``async for``."""

    def __init__(self, broadcaster: "AsyncBroadcaster[T]") -> None:
        self._broadcaster = broadcaster

    def __aiter__(self) -> AsyncGenerator[T, None]:
        return self._broadcaster._listen(None)

    def values(self, *, cancellation_token: CancellationToken | None = None) -> AsyncGenerator[T, None]:
        return self._broadcaster._listen(cancellation_token)


class AsyncBroadcaster(Generic[T]):
    """Broadcasts the values of a single upstream source to many listeners.

    Values are kept in a shared buffer until every registered listener has
    read past them. Each listener only sees values appended after its first
    pull. The upstream is drained as fast as it yields, so a slow listener
    grows the buffer rather than slowing the producer.

    Every mutation of the buffer and of the cursor map happens without an
    ``await`` in between, which keeps each step indivisible on the event loop.
    """

    def __init__(self, source: AsyncIterable[T] | None = None) -> None:
        self._buffer: list[T] = []
        self._ids = itertools.count()
        # listener id -> index into self._buffer of the next unread value
        self._cursors: dict[int, int] = {}
        self._pending: asyncio.Future[None] | None = None
        self._closed = False
        self._error: BaseException | None = None
        self._ingest_task: asyncio.Task[None] | None = None
        self.iterable: BroadcastIterable[T] = BroadcastIterable(self)

        if source is not None:
            loop = asyncio.get_running_loop()
            self._ingest_task = loop.create_task(self._push_all(source))

    @property
    def listener_count(self) -> int:
        return len(self._cursors)

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def error(self) -> BaseException | None:
        return self._error

    async def aclose(self) -> None:
        """Stop pulling from upstream. Listeners drain the buffer and finish."""
        task = self._ingest_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._closed = True
        self._notify()

    async def _push_all(self, source: AsyncIterable[T]) -> None:
        count = 0
        try:
            async for value in source:
                self._buffer.append(value)
                count += 1
                self._notify()
        except asyncio.CancelledError:
            logger.debug("Ingestion cancelled after %d values", count)
        except Exception as exc:
            self._error = exc
            logger.exception("Upstream source failed after %d values; broadcasting stopped", count)
        else:
            logger.info("Upstream source exhausted after %d values", count)
        finally:
            self._closed = True
            self._notify()

    def _notify(self) -> None:
        # Wake every listener blocked on the current signal.
        pending, self._pending = self._pending, None
        if pending is not None and not pending.done():
            pending.set_result(None)

    async def _listen(self, token: CancellationToken | None) -> AsyncGenerator[T, None]:
        listener_id = next(self._ids)
        self._cursors[listener_id] = len(self._buffer)
        logger.debug(
            "Listener %d registered at cursor %d",
            listener_id,
            len(self._buffer),
            extra={"listener_id": listener_id},
        )

        loop = asyncio.get_running_loop()
        aborted: asyncio.Future[None] | None = None

        def _on_cancel() -> None:
            self._remove(listener_id)
            if aborted is not None and not aborted.done():
                aborted.set_result(None)

        if token is not None:
            aborted = loop.create_future()
            token.add_callback(_on_cancel)

        try:
            while token is None or not token.cancelled:
                cursor = self._cursors[listener_id]
                if cursor == len(self._buffer):
                    if self._closed:
                        return
                    if self._pending is None:
                        self._pending = loop.create_future()
                    waiters: set[asyncio.Future[None]] = {self._pending}
                    if aborted is not None:
                        waiters.add(aborted)
                    # asyncio.wait leaves the shared signal untouched if this task is cancelled
                    await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
                    continue

                value = self._buffer[cursor]
                self._cursors[listener_id] = cursor + 1
                self._trim()
                yield value
        finally:
            if token is not None:
                token.remove_callback(_on_cancel)
            self._remove(listener_id)

    def _remove(self, listener_id: int) -> None:
        if self._cursors.pop(listener_id, None) is None:
            return
        logger.debug("Listener %d removed", listener_id, extra={"listener_id": listener_id})
        self._trim()

    def _trim(self) -> None:
        if not self._cursors:
            return
        low = min(self._cursors.values())
        if low <= 0:
            return
        del self._buffer[:low]
        for listener_id, cursor in self._cursors.items():
            self._cursors[listener_id] = cursor - low
        logger.debug("Trimmed %d values", low, extra={"buffered": len(self._buffer)})
