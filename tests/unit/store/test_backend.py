"""Tests for the in-memory storage backend."""

import pytest

from chainevents.domain import WriteFailed, matching_event_predicate, token_contract_predicate


@pytest.fixture
def transfer_key(token_contract):
    """Predicate for Transfer events of the default token contract."""
    return matching_event_predicate(token_contract, token_contract, 1, "Transfer")


@pytest.mark.asyncio
async def test_find_orders_by_block_then_log_index(backend, make_event, transfer_key):
    """Test ordering of find() results."""
    await backend.upsert_many(
        [
            make_event(block_number=200, log_index=0),
            make_event(block_number=100, log_index=5),
            make_event(block_number=100, log_index=1),
        ]
    )

    events = await backend.find(transfer_key)

    assert [event.position for event in events] == [(100, 1), (100, 5), (200, 0)]


@pytest.mark.asyncio
async def test_find_latest_returns_highest_block(backend, make_event, transfer_key):
    """Test that find_latest picks the maximum block number."""
    await backend.upsert_many([make_event(block_number=b) for b in (300, 100, 200)])

    latest = await backend.find_latest(transfer_key)

    assert latest is not None
    assert latest.block_number == 300


@pytest.mark.asyncio
async def test_find_latest_empty(backend, transfer_key):
    """Test find_latest with no records."""
    assert await backend.find_latest(transfer_key) is None


@pytest.mark.asyncio
async def test_find_first(backend, make_event, transfer_key):
    """Test find_first returns a match or None."""
    assert await backend.find_first(transfer_key) is None

    await backend.upsert_many([make_event()])

    assert await backend.find_first(transfer_key) == make_event()


@pytest.mark.asyncio
async def test_upsert_replaces_same_identity(backend, make_event, transfer_key):
    """Test that a record with an existing primary key replaces it."""
    await backend.upsert_many([make_event(key="slot", block_number=100)])
    await backend.upsert_many([make_event(key="slot", block_number=200)])

    events = await backend.find(transfer_key)

    assert len(events) == 1
    assert events[0].block_number == 200


@pytest.mark.asyncio
async def test_upsert_within_batch_last_wins(backend, make_event, transfer_key):
    """Test duplicates inside one batch collapse to the last one."""
    await backend.upsert_many(
        [make_event(key="slot", data={"n": 1}), make_event(key="slot", data={"n": 2})]
    )

    events = await backend.find(transfer_key)

    assert [event.data for event in events] == [{"n": 2}]


@pytest.mark.asyncio
async def test_failed_batch_is_not_partially_applied(backend, make_event, transfer_key):
    """Test that a rejected batch leaves the store unchanged."""
    await backend.upsert_many([make_event(block_number=1)])

    with pytest.raises(WriteFailed):
        await backend.upsert_many([make_event(block_number=2), "not an event"])  # type: ignore[list-item]

    events = await backend.find(transfer_key)

    assert [event.block_number for event in events] == [1]


@pytest.mark.asyncio
async def test_reads_return_detached_copies(backend, make_event, transfer_key):
    """Test that mutating a returned payload does not touch stored state."""
    await backend.upsert_many([make_event(data={"value": "1"})])

    returned = await backend.find_first(transfer_key)
    returned.data["value"] = "999"

    stored = await backend.find_first(transfer_key)

    assert stored.data == {"value": "1"}


@pytest.mark.asyncio
async def test_stored_copy_detached_from_input(backend, make_event, transfer_key):
    """Test that mutating the written value does not touch stored state."""
    event = make_event(data={"value": "1"})
    await backend.upsert_many([event])

    event.data["value"] = "999"

    stored = await backend.find_first(transfer_key)

    assert stored.data == {"value": "1"}


@pytest.mark.asyncio
async def test_delete_where(backend, make_event, token_contract, other_token_contract):
    """Test deleting by token contract."""
    await backend.upsert_many(
        [
            make_event(block_number=1),
            make_event(block_number=2),
            make_event(token_contract=other_token_contract, block_number=3),
        ]
    )

    deleted = await backend.delete_where(token_contract_predicate(token_contract))

    assert deleted == 2
    assert await backend.find(token_contract_predicate(token_contract)) == []
    assert len(await backend.find(token_contract_predicate(other_token_contract))) == 1


@pytest.mark.asyncio
async def test_delete_where_no_match(backend, token_contract):
    """Test deleting when nothing matches."""
    assert await backend.delete_where(token_contract_predicate(token_contract)) == 0
