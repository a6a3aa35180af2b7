"""Exceptions raised by the event store and its storage backends."""


class EventStoreError(Exception):
    """Base class for event store failures."""

    pass


class WriteFailed(EventStoreError):
    """Raised when a transactional write did not commit.

    Backends raise this after rolling the batch back, so the store never
    holds a partially applied write.
    """

    pass


class StoreUnavailable(EventStoreError):
    """Raised when an operation reaches a store that has been torn down.

    Queued operations that had not started when the store was closed, and
    any operation submitted afterwards, fail with this error instead of
    waiting forever.
    """

    pass
