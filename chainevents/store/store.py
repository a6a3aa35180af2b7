"""Event store for decoded smart-contract event instances."""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from ulid import ULID

from ..domain import (
    EventInstanceValue,
    WriteFailed,
    canonical_address,
    matching_event_predicate,
    token_contract_predicate,
)
from .backend import InMemoryStorageBackend, StorageBackend
from .subscriptions import Subscriber, SubscriptionRegistry
from .worker import StorageWorker

LOGGER = logging.getLogger(__name__)


class WriteStatus(str, Enum):
    """Outcome of a store mutation."""

    COMMITTED = "committed"
    """The write committed."""

    SKIPPED = "skipped"
    """Nothing to write; storage was not touched."""

    FAILED = "failed"
    """The write did not commit and was rolled back."""


class EventsDataStore:
    """Persists event instances and notifies subscribers of new arrivals.

    Every operation, reads included, is executed by a StorageWorker that
    owns the backend, so callers on any task see a single-writer store.
    Appends are upserts keyed by ``EventInstanceValue.primary_key`` and are
    followed, inside the same serialized step, by one notification to every
    subscriber.

    Write failures never raise out of ``add`` or ``delete_events``. They are
    logged and reported through the returned WriteStatus.

    Attributes:
        subscriptions: Registry notified after each committed append.

    Examples:
        >>> store = EventsDataStore(InMemoryStorageBackend())
        >>> store.subscribe(lambda token_contract: refresh(token_contract))
        >>> await store.add([transfer], token_contract=nft)
        <WriteStatus.COMMITTED: 'committed'>
        >>> latest = await store.get_last_matching_event(nft, nft, 1, "Transfer")
        >>> await store.close()

        >>> async with EventsDataStore() as store:
        ...     await store.delete_events(nft)
    """

    def __init__(
        self,
        backend: StorageBackend | None = None,
        subscriptions: SubscriptionRegistry | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            backend: Storage handle to take ownership of. Defaults to a fresh
                InMemoryStorageBackend.
            subscriptions: Registry to notify. Defaults to an empty one.
        """
        if backend is None:
            backend = InMemoryStorageBackend()
        if subscriptions is None:
            subscriptions = SubscriptionRegistry()
        self._worker = StorageWorker(backend)
        self.subscriptions = subscriptions

    async def get_last_matching_event(
        self,
        contract: Any,
        token_contract: Any,
        chain_id: int,
        event_name: str,
    ) -> EventInstanceValue | None:
        """Get the most recent event for a contract/event key.

        Args:
            contract: Emitting contract address.
            token_contract: Token contract address.
            chain_id: Chain identifier.
            event_name: Event name.

        Returns:
            The matching event with the highest block number, or None.

        Raises:
            StoreUnavailable: If the store was closed before the query ran.
        """
        predicate = matching_event_predicate(contract, token_contract, chain_id, event_name)
        return await self._worker.submit(lambda backend: backend.find_latest(predicate))

    async def get_matching_event(
        self,
        contract: Any,
        token_contract: Any,
        chain_id: int,
        event_name: str,
        filter_name: str,
        filter_value: str,
    ) -> EventInstanceValue | None:
        """Get the event stored in one filter slot of a contract/event key.

        A filter slot is expected to hold at most one event; when several
        match, which one is returned is unspecified.

        Returns:
            A matching event, or None.
        """
        predicate = matching_event_predicate(
            contract,
            token_contract,
            chain_id,
            event_name,
            filter_name=filter_name,
            filter_value=filter_value,
        )
        return await self._worker.submit(lambda backend: backend.find_first(predicate))

    async def get_events(self, token_contract: Any) -> list[EventInstanceValue]:
        """Get every event associated with a token contract, oldest first."""
        predicate = token_contract_predicate(token_contract)
        return await self._worker.submit(lambda backend: backend.find(predicate))

    async def add(self, events: Iterable[EventInstanceValue], token_contract: Any) -> WriteStatus:
        """Upsert a batch of events and notify subscribers.

        The batch is written atomically. Subscribers are notified once, with
        ``token_contract``, only after the batch has committed. The token
        contract is taken as given; it is not derived from the events.

        Args:
            events: Events to store, any iterable. Empty batches are ignored.
            token_contract: Token contract reported to subscribers.

        Returns:
            SKIPPED for an empty batch, COMMITTED on success, FAILED if the
            write did not commit (no subscriber is notified).
        """
        batch = list(events)
        if not batch:
            return WriteStatus.SKIPPED

        contract = canonical_address(token_contract)

        async def append(backend: StorageBackend) -> WriteStatus:
            try:
                await backend.upsert_many(batch)
            except WriteFailed:
                LOGGER.error(
                    "Failed to store events",
                    exc_info=True,
                    extra={"token_contract": contract, "batch_size": len(batch)},
                )
                return WriteStatus.FAILED

            LOGGER.debug(
                "Stored events",
                extra={"token_contract": contract, "batch_size": len(batch)},
            )
            self.subscriptions.notify(contract)
            return WriteStatus.COMMITTED

        return await self._worker.submit(append)

    async def delete_events(self, token_contract: Any) -> WriteStatus:
        """Delete every event associated with a token contract.

        Deleting is not an arrival, so subscribers are not notified.

        Returns:
            COMMITTED (also when nothing matched) or FAILED.
        """
        contract = canonical_address(token_contract)
        predicate = token_contract_predicate(contract)

        async def delete(backend: StorageBackend) -> WriteStatus:
            try:
                deleted = await backend.delete_where(predicate)
            except WriteFailed:
                LOGGER.error(
                    "Failed to delete events",
                    exc_info=True,
                    extra={"token_contract": contract},
                )
                return WriteStatus.FAILED

            LOGGER.debug(
                "Deleted events",
                extra={"token_contract": contract, "deleted": deleted},
            )
            return WriteStatus.COMMITTED

        return await self._worker.submit(delete)

    def subscribe(self, callback: Subscriber) -> ULID:
        """Register a callback for appended events.

        Callbacks run inside the store's serialized context and delay every
        pending operation while they execute; keep them short.

        Returns:
            Subscription ID for ``unsubscribe``.

        Raises:
            TypeError: If ``callback`` is a coroutine function.
        """
        return self.subscriptions.subscribe(callback)

    def unsubscribe(self, subscription_id: ULID) -> bool:
        """Remove a subscription. Returns False if it did not exist."""
        return self.subscriptions.unsubscribe(subscription_id)

    @property
    def closed(self) -> bool:
        """Whether the store has been torn down."""
        return self._worker.closed

    async def close(self) -> None:
        """Tear the store down.

        Queued operations that have not started fail with StoreUnavailable.
        The backend is closed once the running operation completes.
        """
        await self._worker.close()

    async def __aenter__(self) -> "EventsDataStore":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - ensures the store is closed."""
        await self.close()
        return False
