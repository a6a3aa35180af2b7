"""Domain values for the contract event store.

- EventInstanceValue: Immutable snapshot of one decoded event occurrence
- EventFilter: Name/value slot refinement of an event type
- EventPredicate: Composite match criteria used by every query
- Address helpers: EIP-55 canonicalisation of contract addresses
- Exceptions: WriteFailed, StoreUnavailable
"""

from .address import Address, canonical_address, checksum_address
from .event import EventFilter, EventInstanceValue
from .exceptions import EventStoreError, StoreUnavailable, WriteFailed
from .predicate import (
    EventPredicate,
    contract_predicate,
    matching_event_predicate,
    token_contract_predicate,
)

__all__ = [
    "Address",
    "canonical_address",
    "checksum_address",
    "EventFilter",
    "EventInstanceValue",
    "EventPredicate",
    "contract_predicate",
    "matching_event_predicate",
    "token_contract_predicate",
    "EventStoreError",
    "StoreUnavailable",
    "WriteFailed",
]
