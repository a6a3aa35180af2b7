"""chainevents - Local store for decoded smart-contract event instances.

This module provides the public API for persisting, querying and observing
contract events captured while monitoring on-chain activity.
"""

from .config import EventStoreSettings, create_events_data_store
from .domain import (
    EventFilter,
    EventInstanceValue,
    EventPredicate,
    EventStoreError,
    StoreUnavailable,
    WriteFailed,
    matching_event_predicate,
    token_contract_predicate,
)
from .store import (
    EventsDataStore,
    InMemoryStorageBackend,
    StorageBackend,
    SubscriptionRegistry,
    WriteStatus,
)

__all__ = [
    # Store
    "EventsDataStore",
    "WriteStatus",
    "StorageBackend",
    "InMemoryStorageBackend",
    "SubscriptionRegistry",
    # Configuration
    "EventStoreSettings",
    "create_events_data_store",
    # Domain values
    "EventFilter",
    "EventInstanceValue",
    "EventPredicate",
    "matching_event_predicate",
    "token_contract_predicate",
    # Errors
    "EventStoreError",
    "StoreUnavailable",
    "WriteFailed",
]
