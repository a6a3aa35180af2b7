"""MongoDB collection wrapper with index management and query helpers.

This module provides an IndexedCollection class that wraps a MongoDB
AsyncCollection with lazy index creation and the handful of operations the
event storage backend needs.
"""

from collections.abc import AsyncIterator
from enum import IntEnum
from typing import Any

from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, ReplaceOne
from pymongo.asynchronous.client_session import AsyncClientSession
from pymongo.asynchronous.collection import AsyncCollection


class IndexDirection(IntEnum):
    """Sort direction for MongoDB index fields."""

    ASC = ASCENDING
    """Ascending order (1)."""

    DESC = DESCENDING
    """Descending order (-1)."""


class IndexSpec(BaseModel):
    """Specification for a MongoDB index.

    Example:
        >>> IndexSpec(keys=[("token_contract", IndexDirection.ASC)])
        >>>
        >>> IndexSpec(
        ...     keys=[
        ...         ("event_name", IndexDirection.ASC),
        ...         ("block_number", IndexDirection.DESC),
        ...     ],
        ...     unique=True,
        ... )
    """

    keys: list[tuple[str, IndexDirection]]
    """(field_name, direction) tuples."""

    unique: bool = False
    """If True, enforce uniqueness."""

    async def apply(self, collection: AsyncCollection[dict[str, Any]]) -> None:
        """Apply this index specification to a collection.

        Args:
            collection: The MongoDB collection to create the index on.
        """
        kwargs: dict[str, Any] = {}
        if self.unique:
            kwargs["unique"] = True

        await collection.create_index([(key, int(direction)) for key, direction in self.keys], **kwargs)


class IndexedCollection:
    """A MongoDB collection wrapper with automatic index management.

    IndexedCollection wraps an AsyncCollection and handles:
    - Lazy index creation (indexes created on first use)
    - Find, latest-by-field and bulk replace/delete operations
    - Optional client sessions, so writes can join a transaction

    The storage backend handles conversion between event values and
    documents; this class only speaks documents.

    Example:
        >>> collection = IndexedCollection(
        ...     config.events,
        ...     indexes=[IndexSpec(keys=[("token_contract", IndexDirection.ASC)])],
        ... )
        >>> async for doc in collection.find({"token_contract": "0x..."}):
        ...     print(doc)
    """

    def __init__(
        self,
        collection: AsyncCollection[dict[str, Any]],
        indexes: list[IndexSpec] | None = None,
    ) -> None:
        """Initialize the indexed collection.

        Args:
            collection: The underlying MongoDB AsyncCollection.
            indexes: List of index specifications to create.
        """
        self._collection = collection
        self._indexes = indexes or []
        self._indexes_created = False

    async def ensure_indexes(self) -> None:
        """Create indexes if not already created.

        Called automatically by other methods, but can be called
        explicitly for eager initialization.
        """
        if self._indexes_created:
            return

        for spec in self._indexes:
            await spec.apply(self._collection)

        self._indexes_created = True

    # ========== Find Operations ==========

    async def find_one(self, filter: dict[str, Any]) -> dict[str, Any] | None:
        """Find a single document matching the filter.

        Args:
            filter: MongoDB query filter.

        Returns:
            The matching document or None.
        """
        await self.ensure_indexes()
        result: dict[str, Any] | None = await self._collection.find_one(filter)
        return result

    async def find(
        self,
        filter: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        limit: int | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Find documents matching the filter.

        Args:
            filter: MongoDB query filter.
            sort: Optional list of (field, direction) tuples.
            limit: Optional maximum number of documents to return.

        Yields:
            Matching documents.
        """
        await self.ensure_indexes()

        cursor = self._collection.find(filter)

        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)

        async for doc in cursor:
            yield doc

    async def find_latest(
        self,
        filter: dict[str, Any],
        sort_fields: list[str],
    ) -> dict[str, Any] | None:
        """Find the latest document by one or more sort fields.

        Args:
            filter: MongoDB query filter.
            sort_fields: Fields to sort by, all descending, most significant
                first.

        Returns:
            The latest matching document or None.
        """
        async for doc in self.find(
            filter,
            sort=[(field, DESCENDING) for field in sort_fields],
            limit=1,
        ):
            return doc
        return None

    # ========== Write Operations ==========

    async def replace_many(
        self,
        documents: list[dict[str, Any]],
        session: AsyncClientSession | None = None,
    ) -> None:
        """Upsert documents by ``_id`` in one ordered bulk write.

        Args:
            documents: Full replacement documents, each carrying its ``_id``.
            session: Optional session the write participates in.
        """
        await self.ensure_indexes()
        requests = [ReplaceOne({"_id": doc["_id"]}, doc, upsert=True) for doc in documents]
        await self._collection.bulk_write(requests, ordered=True, session=session)

    async def delete_many(
        self,
        filter: dict[str, Any],
        session: AsyncClientSession | None = None,
    ) -> int:
        """Delete all documents matching the filter.

        Args:
            filter: MongoDB query filter.
            session: Optional session the delete participates in.

        Returns:
            Number of documents deleted.
        """
        await self.ensure_indexes()
        result = await self._collection.delete_many(filter, session=session)
        return result.deleted_count
