"""Event store infrastructure.

This package provides:
- EventsDataStore: add/delete/query/subscribe operations
- StorageBackend: Abstract persistence contract, plus an in-memory engine
- StorageWorker: Single-owner serialization of backend access
- SubscriptionRegistry: Ordered callbacks notified of new events
"""

from .backend import InMemoryStorageBackend, StorageBackend
from .store import EventsDataStore, WriteStatus
from .subscriptions import Subscriber, SubscriptionRegistry
from .worker import StorageWorker

__all__ = [
    "EventsDataStore",
    "WriteStatus",
    "StorageBackend",
    "InMemoryStorageBackend",
    "StorageWorker",
    "Subscriber",
    "SubscriptionRegistry",
]
