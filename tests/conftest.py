"""Central test fixtures for the event store."""

from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
import pytest_asyncio

from chainevents import EventFilter, EventInstanceValue, EventsDataStore, InMemoryStorageBackend

# EIP-55 reference addresses, already in checksummed form
TOKEN_CONTRACT = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
OTHER_TOKEN_CONTRACT = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
EMITTER = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
OTHER_EMITTER = "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb"


@pytest.fixture
def token_contract() -> str:
    """Checksummed token contract address."""
    return TOKEN_CONTRACT


@pytest.fixture
def other_token_contract() -> str:
    """A second, unrelated token contract address."""
    return OTHER_TOKEN_CONTRACT


@pytest.fixture
def emitter() -> str:
    """Checksummed address of a contract emitting events."""
    return EMITTER


@pytest.fixture
def other_emitter() -> str:
    """A second emitting contract address."""
    return OTHER_EMITTER


@pytest.fixture
def make_event() -> Callable[..., EventInstanceValue]:
    """Factory for event values with sensible defaults.

    Keyword arguments override the defaults; ``filter`` may be given as a
    ``(name, value)`` tuple.
    """

    def factory(**overrides: Any) -> EventInstanceValue:
        fields: dict[str, Any] = {
            "contract": TOKEN_CONTRACT,
            "token_contract": TOKEN_CONTRACT,
            "chain_id": 1,
            "event_name": "Transfer",
            "block_number": 100,
            "log_index": 0,
            "data": {"from": EMITTER, "to": OTHER_EMITTER, "value": "1"},
        }
        fields.update(overrides)
        if isinstance(fields.get("filter"), tuple):
            name, value = fields["filter"]
            fields["filter"] = EventFilter(name=name, value=value)
        return EventInstanceValue(**fields)

    return factory


@pytest.fixture
def backend() -> InMemoryStorageBackend:
    """Create an in-memory storage backend."""
    return InMemoryStorageBackend()


@pytest_asyncio.fixture
async def store(backend: InMemoryStorageBackend) -> AsyncIterator[EventsDataStore]:
    """Create an event store over the in-memory backend, closed afterwards."""
    async with EventsDataStore(backend) as events_store:
        yield events_store


@pytest.fixture
def notifications() -> list[str]:
    """Collects token contracts received by a recording subscriber."""
    return []
