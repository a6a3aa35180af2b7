"""MongoDB integration for the chainevents event store.

This module provides a MongoDB implementation of the StorageBackend
interface using the async PyMongo driver.

Installation:
    pip install chainevents[mongodb]

Usage:
    >>> from chainevents import EventsDataStore
    >>> from chainevents.integrations.mongodb import (
    ...     MongoConfiguration,
    ...     MongoStorageBackend,
    ... )
    >>>
    >>> config = MongoConfiguration(uri="mongodb://localhost:27017", database="wallet")
    >>> store = EventsDataStore(MongoStorageBackend(config))
"""

from .backend import MongoStorageBackend, from_document, to_document, to_query
from .collection import IndexDirection, IndexedCollection, IndexSpec
from .config import MongoConfiguration

__all__ = [
    "MongoConfiguration",
    "MongoStorageBackend",
    "IndexDirection",
    "IndexedCollection",
    "IndexSpec",
    "from_document",
    "to_document",
    "to_query",
]
