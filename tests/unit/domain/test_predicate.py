"""Tests for the predicate builder."""

from chainevents.domain import (
    EventPredicate,
    contract_predicate,
    matching_event_predicate,
    token_contract_predicate,
)


def test_four_clause_predicate(token_contract, emitter):
    """Test the unfiltered composite key."""
    predicate = matching_event_predicate(emitter, token_contract, 1, "Transfer")

    assert predicate.to_query() == {
        "contract": emitter,
        "token_contract": token_contract,
        "chain_id": 1,
        "event_name": "Transfer",
    }


def test_five_clause_predicate(token_contract, emitter):
    """Test the filtered composite key."""
    predicate = matching_event_predicate(
        emitter, token_contract, 1, "Transfer", filter_name="tokenId", filter_value="5"
    )

    assert predicate.to_query() == {
        "contract": emitter,
        "token_contract": token_contract,
        "chain_id": 1,
        "event_name": "Transfer",
        "filter_name": "tokenId",
        "filter_value": "5",
    }


def test_predicate_canonicalises_addresses(token_contract, emitter):
    """Test that differently-cased addresses build the same predicate."""
    lower = matching_event_predicate(emitter.lower(), token_contract.lower(), 1, "Transfer")
    mixed = matching_event_predicate(emitter, token_contract, 1, "Transfer")

    assert lower == mixed


def test_predicate_with_malformed_address_matches_nothing(make_event):
    """Test that malformed input builds a predicate instead of raising."""
    predicate = matching_event_predicate("0xAAA", "0xAAA", 1, "Transfer")

    assert predicate.contract == "0xAAA"
    assert not predicate.matches(make_event())


def test_matches_unfiltered_key(make_event, token_contract):
    """Test matching against each clause of the composite key."""
    event = make_event()
    predicate = matching_event_predicate(token_contract, token_contract, 1, "Transfer")

    assert predicate.matches(event)
    assert not predicate.matches(make_event(chain_id=5))
    assert not predicate.matches(make_event(event_name="Approval"))


def test_unfiltered_predicate_ignores_filter(make_event, token_contract):
    """Test that the four-clause predicate matches any filter slot."""
    predicate = matching_event_predicate(token_contract, token_contract, 1, "Transfer")

    assert predicate.matches(make_event(filter=("tokenId", "5")))


def test_filtered_predicate_selects_slot(make_event, token_contract):
    """Test that the filter clause selects one slot."""
    predicate = matching_event_predicate(
        token_contract, token_contract, 1, "Transfer", filter_name="tokenId", filter_value="5"
    )

    assert predicate.matches(make_event(filter=("tokenId", "5")))
    assert not predicate.matches(make_event(filter=("tokenId", "6")))
    assert not predicate.matches(make_event(filter=("owner", "5")))
    assert not predicate.matches(make_event())


def test_filter_value_containing_separator(make_event, token_contract):
    """Test that '=' inside a value does not confuse matching."""
    predicate = matching_event_predicate(
        token_contract, token_contract, 1, "Transfer", filter_name="a", filter_value="b=c"
    )

    assert predicate.matches(make_event(filter=("a", "b=c")))
    assert not predicate.matches(make_event(filter=("a=b", "c")))


def test_token_contract_predicate(make_event, token_contract, other_token_contract, emitter):
    """Test the single-clause token contract predicate."""
    predicate = token_contract_predicate(token_contract.lower())

    assert predicate.to_query() == {"token_contract": token_contract}
    assert predicate.matches(make_event(contract=emitter))
    assert not predicate.matches(make_event(token_contract=other_token_contract))


def test_contract_predicate(make_event, emitter):
    """Test the single-clause emitting contract predicate."""
    predicate = contract_predicate(emitter)

    assert predicate.matches(make_event(contract=emitter))
    assert not predicate.matches(make_event())


def test_empty_predicate_matches_everything(make_event):
    """Test that an unconstrained predicate matches any event."""
    assert EventPredicate().matches(make_event())
