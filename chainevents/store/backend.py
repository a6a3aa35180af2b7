"""Storage backend interfaces and implementations for event persistence."""

from abc import ABC, abstractmethod

from ..domain import EventInstanceValue, EventPredicate, WriteFailed


class StorageBackend(ABC):
    """Abstract interface for the engine that persists event instances.

    The backend is the single handle the event store funnels all of its
    work through. It is only ever driven from one task at a time (see
    StorageWorker), so implementations need not be safe for concurrent use.

    Key responsibilities:
    - **Identity**: Records are keyed by ``EventInstanceValue.primary_key``
    - **Atomicity**: Batch writes and deletes are all-or-nothing
    - **Ordering**: Ordered reads sort by block number, then log index
    - **Isolation**: Reads return detached values, never live records
    """

    @abstractmethod
    async def find(self, predicate: EventPredicate) -> list[EventInstanceValue]:
        """Load every record matching a predicate.

        Args:
            predicate: Match criteria.

        Returns:
            Matching records ordered by ``(block_number, log_index)``
            ascending. Empty list when nothing matches.
        """
        ...

    @abstractmethod
    async def find_first(self, predicate: EventPredicate) -> EventInstanceValue | None:
        """Load any one record matching a predicate.

        No ordering is applied: which record is returned among several
        matches is backend-defined.
        """
        ...

    @abstractmethod
    async def find_latest(self, predicate: EventPredicate) -> EventInstanceValue | None:
        """Load the matching record with the highest block number.

        Ties on block number are broken by the highest log index.

        Returns:
            The latest matching record, or None when nothing matches.
        """
        ...

    @abstractmethod
    async def upsert_many(self, events: list[EventInstanceValue]) -> None:
        """Insert or replace records by primary key in one atomic write.

        Args:
            events: Records to write. A record whose primary key already
                exists replaces the stored one; within the batch, a later
                record replaces an earlier one with the same key.

        Raises:
            WriteFailed: If the write did not commit. Nothing from the batch
                is visible afterwards.
        """
        ...

    @abstractmethod
    async def delete_where(self, predicate: EventPredicate) -> int:
        """Delete every record matching a predicate in one atomic write.

        Returns:
            Number of records removed. Zero is not an error.

        Raises:
            WriteFailed: If the delete did not commit.
        """
        ...

    async def close(self) -> None:
        """Release the underlying resources. No-op by default."""
        pass


class InMemoryStorageBackend(StorageBackend):
    """Dictionary-based in-memory storage for testing.

    Stores records in a dictionary keyed by primary key. Batches are staged
    on a copy of the dictionary and swapped in once complete, so a failing
    batch leaves the previous state untouched.

    This implementation is suitable for:
    - Unit tests (fast, no external dependencies)
    - Development and experimentation

    **NOT suitable for production** due to:
    - No durability (data lost on restart)
    - Linear scans for every query
    - Memory usage grows unbounded
    """

    def __init__(self) -> None:
        """Initialize an empty in-memory store."""
        self.by_primary_key: dict[str, EventInstanceValue] = {}

    async def find(self, predicate: EventPredicate) -> list[EventInstanceValue]:
        # sorted() is stable, so equal positions keep write order
        matches = sorted(self._matching(predicate), key=lambda event: event.position)
        return [event.model_copy(deep=True) for event in matches]

    async def find_first(self, predicate: EventPredicate) -> EventInstanceValue | None:
        for event in self._matching(predicate):
            return event.model_copy(deep=True)
        return None

    async def find_latest(self, predicate: EventPredicate) -> EventInstanceValue | None:
        matches = await self.find(predicate)
        return matches[-1] if matches else None

    async def upsert_many(self, events: list[EventInstanceValue]) -> None:
        staged = dict(self.by_primary_key)
        for event in events:
            if not isinstance(event, EventInstanceValue):
                raise WriteFailed(f"Cannot store {type(event).__name__} as an event instance")
            # Re-inserting moves the key to the end, keeping write order for ties
            staged.pop(event.primary_key, None)
            staged[event.primary_key] = event.model_copy(deep=True)
        self.by_primary_key = staged

    async def delete_where(self, predicate: EventPredicate) -> int:
        doomed = [event.primary_key for event in self._matching(predicate)]
        for primary_key in doomed:
            del self.by_primary_key[primary_key]
        return len(doomed)

    def _matching(self, predicate: EventPredicate) -> list[EventInstanceValue]:
        return [event for event in self.by_primary_key.values() if predicate.matches(event)]
