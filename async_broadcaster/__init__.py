"""Turn a single-consumer async iterable into a multicast source."""

from .broadcaster import AsyncBroadcaster, BroadcastIterable
from .cancellation import CancellationToken
from .exceptions import BroadcasterError, SourceClosedError
from .sources import PushSource, ticker

__all__ = [
    "AsyncBroadcaster",
    "BroadcastIterable",
    "BroadcasterError",
    "CancellationToken",
    "PushSource",
    "SourceClosedError",
    "ticker",
]
