"""MongoDB implementation of StorageBackend for event instances.

Each event instance is one document whose ``_id`` is the event's primary
key, so replacing by ``_id`` gives upsert-by-identity for free.
"""

import logging
from typing import Any

from pymongo.errors import PyMongoError

from chainevents.domain import EventFilter, EventInstanceValue, EventPredicate, WriteFailed
from chainevents.store import StorageBackend

from .collection import IndexDirection, IndexedCollection, IndexSpec
from .config import MongoConfiguration

LOGGER = logging.getLogger(__name__)

_KEY_FIELDS = ["contract", "chain_id", "token_contract", "event_name"]

EVENT_INDEXES = [
    IndexSpec(
        keys=[(field, IndexDirection.ASC) for field in [*_KEY_FIELDS, "filter_name", "filter_value"]]
    ),
    IndexSpec(
        keys=[
            *[(field, IndexDirection.ASC) for field in _KEY_FIELDS],
            ("block_number", IndexDirection.DESC),
            ("log_index", IndexDirection.DESC),
        ]
    ),
    IndexSpec(keys=[("token_contract", IndexDirection.ASC)]),
]


def to_document(event: EventInstanceValue) -> dict[str, Any]:
    """Convert an event value into its stored document.

    The legacy ``filter`` string is written next to the explicit filter
    attributes so that older readers keep working.
    """
    return {
        "_id": event.primary_key,
        "key": event.key,
        "contract": event.contract,
        "token_contract": event.token_contract,
        "chain_id": event.chain_id,
        "event_name": event.event_name,
        "block_number": event.block_number,
        "log_index": event.log_index,
        "filter": event.legacy_filter,
        "filter_name": event.filter.name if event.filter is not None else None,
        "filter_value": event.filter.value if event.filter is not None else None,
        "data": event.data,
    }


def to_query(predicate: EventPredicate) -> dict[str, Any]:
    """Render a predicate as a MongoDB filter.

    A filter clause also matches documents that only carry the legacy
    ``name=value`` string, so records written before the split stay
    reachable without a migration.
    """
    query = predicate.to_query()
    if "filter_name" not in query and "filter_value" not in query:
        return query

    filter_name = query.pop("filter_name", "")
    filter_value = query.pop("filter_value", "")
    query["$or"] = [
        {"filter_name": filter_name, "filter_value": filter_value},
        {"filter_name": None, "filter": f"{filter_name}={filter_value}"},
    ]
    return query


def from_document(doc: dict[str, Any]) -> EventInstanceValue:
    """Convert a stored document back into an event value.

    Documents written before the filter was split carry only the legacy
    string; it is parsed when the explicit attributes are missing.
    """
    if doc.get("filter_name") is not None:
        event_filter = EventFilter(name=doc["filter_name"], value=doc.get("filter_value") or "")
    else:
        event_filter = EventFilter.parse(doc.get("filter") or "")

    return EventInstanceValue(
        key=doc.get("key"),
        contract=doc["contract"],
        token_contract=doc["token_contract"],
        chain_id=doc["chain_id"],
        event_name=doc["event_name"],
        block_number=doc["block_number"],
        log_index=doc.get("log_index", 0),
        filter=event_filter,
        data=doc.get("data") or {},
    )


class MongoStorageBackend(StorageBackend):
    """MongoDB implementation of the StorageBackend interface.

    This implementation stores event instances with:
    - ``_id`` set to the primary key (replace-by-identity upserts)
    - Compound indexes over the lookup key, with and without the filter
      slot and the block ordering
    - An index on token_contract for bulk deletion

    Batch writes are a single ordered bulk operation run inside a
    multi-document transaction, so they are all-or-nothing. With
    ``MongoConfiguration.use_transactions`` disabled (standalone servers)
    a failed batch is rolled back by compensating writes instead; that
    mode is not atomic with respect to concurrent readers or writers.

    Examples:
        >>> config = MongoConfiguration(uri="mongodb://localhost:27017")
        >>> backend = MongoStorageBackend(config)
        >>> await backend.upsert_many(events)
        >>> latest = await backend.find_latest(predicate)
    """

    def __init__(self, config: MongoConfiguration) -> None:
        """Initialize the MongoDB storage backend.

        Args:
            config: MongoDB configuration providing client and collection
        """
        self.config = config
        self._collection = IndexedCollection(config.events, indexes=EVENT_INDEXES)

    async def find(self, predicate: EventPredicate) -> list[EventInstanceValue]:
        return [
            from_document(doc)
            async for doc in self._collection.find(
                to_query(predicate),
                sort=[("block_number", IndexDirection.ASC), ("log_index", IndexDirection.ASC)],
            )
        ]

    async def find_first(self, predicate: EventPredicate) -> EventInstanceValue | None:
        doc = await self._collection.find_one(to_query(predicate))
        return from_document(doc) if doc is not None else None

    async def find_latest(self, predicate: EventPredicate) -> EventInstanceValue | None:
        doc = await self._collection.find_latest(
            to_query(predicate), sort_fields=["block_number", "log_index"]
        )
        return from_document(doc) if doc is not None else None

    async def upsert_many(self, events: list[EventInstanceValue]) -> None:
        # Within a batch the last write for an identity wins
        documents = list({doc["_id"]: doc for doc in map(to_document, events)}.values())
        try:
            await self._collection.ensure_indexes()
            if self.config.use_transactions:
                async with self.config.client.start_session() as session:
                    async with await session.start_transaction():
                        await self._collection.replace_many(documents, session=session)
            else:
                await self._replace_with_rollback(documents)
        except PyMongoError as err:
            raise WriteFailed(f"Failed to write {len(documents)} event(s)") from err

    async def delete_where(self, predicate: EventPredicate) -> int:
        try:
            await self._collection.ensure_indexes()
            if self.config.use_transactions:
                async with self.config.client.start_session() as session:
                    async with await session.start_transaction():
                        return await self._collection.delete_many(
                            to_query(predicate), session=session
                        )
            return await self._delete_with_rollback(to_query(predicate))
        except PyMongoError as err:
            raise WriteFailed("Failed to delete events") from err

    async def close(self) -> None:
        await self.config.on_shutdown()

    # ========== Standalone server writes ==========

    async def _replace_with_rollback(self, documents: list[dict[str, Any]]) -> None:
        """Write a batch without a transaction, undoing it if the write fails.

        The documents the batch would overwrite are read first. On failure the
        batch's ``_id``s are deleted and the prior documents written back.
        Another writer touching the same ``_id``s in between can still observe
        or clobber the partial batch.
        """
        ids = [doc["_id"] for doc in documents]
        previous = [doc async for doc in self._collection.find({"_id": {"$in": ids}})]
        try:
            await self._collection.replace_many(documents)
        except PyMongoError:
            await self._restore(ids, previous)
            raise

    async def _delete_with_rollback(self, query: dict[str, Any]) -> int:
        """Delete matching documents without a transaction, restoring them on failure."""
        previous = [doc async for doc in self._collection.find(query)]
        try:
            return await self._collection.delete_many(query)
        except PyMongoError:
            await self._restore([doc["_id"] for doc in previous], previous)
            raise

    async def _restore(self, ids: list[Any], previous: list[dict[str, Any]]) -> None:
        try:
            if ids:
                await self._collection.delete_many({"_id": {"$in": ids}})
            if previous:
                await self._collection.replace_many(previous)
        except PyMongoError:
            LOGGER.error(
                "Failed to roll back partial event write",
                exc_info=True,
                extra={"batch_size": len(ids)},
            )
