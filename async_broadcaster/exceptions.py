"""Exceptions raised by async_broadcaster."""


class BroadcasterError(Exception):
    """Base class for broadcaster errors."""


class SourceClosedError(BroadcasterError):
    """Raised when a value is pushed into a source that has been closed."""
