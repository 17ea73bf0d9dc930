"""Cooperative cancellation tokens for listener sequences."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class CancellationToken:
    """Listener-local termination signal.

    Callbacks run synchronously inside :meth:`cancel`, so whatever they do
    happens before ``cancel()`` returns to its caller.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: object | None = None
        self._callbacks: list[Callback] = []
        self._event: asyncio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> object | None:
        return self._reason

    def cancel(self, reason: object | None = None) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback %r failed", callback)
        if self._event is not None:
            self._event.set()

    def add_callback(self, callback: Callback) -> None:
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callback) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    async def wait(self) -> None:
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()
