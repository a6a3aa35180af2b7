"""Composite match criteria for event queries.

Predicates are plain values: building one has no side effects and never
fails. Inputs that cannot identify a stored record (for example a malformed
address) produce a predicate that simply matches nothing.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

from .address import canonical_address
from .event import EventInstanceValue


class EventPredicate(BaseModel):
    """Conjunction of equality clauses over event attributes.

    Each attribute left as ``None`` is unconstrained. Addresses are expected
    in canonical form; use the constructor functions below rather than
    instantiating this directly.

    Attributes:
        contract: Required emitting contract.
        token_contract: Required token contract.
        chain_id: Required chain identifier.
        event_name: Required event name.
        filter_name: Required filter name.
        filter_value: Required filter value.
    """

    model_config = ConfigDict(frozen=True)

    contract: str | None = None
    token_contract: str | None = None
    chain_id: int | None = None
    event_name: str | None = None
    filter_name: str | None = None
    filter_value: str | None = None

    def to_query(self) -> dict[str, Any]:
        """Render the constrained clauses as a flat field/value document filter.

        Returns:
            Mapping of stored attribute name to required value, suitable as a
            MongoDB query filter.
        """
        return self.model_dump(exclude_none=True)

    def matches(self, event: EventInstanceValue) -> bool:
        """Check whether an event satisfies every constrained clause."""
        filter_name = event.filter.name if event.filter is not None else None
        filter_value = event.filter.value if event.filter is not None else None
        actual = {
            "contract": event.contract,
            "token_contract": event.token_contract,
            "chain_id": event.chain_id,
            "event_name": event.event_name,
            "filter_name": filter_name,
            "filter_value": filter_value,
        }
        return all(actual[field] == expected for field, expected in self.to_query().items())


def contract_predicate(contract: Any) -> EventPredicate:
    """Match events emitted by ``contract``, compared in canonical form."""
    return EventPredicate(contract=canonical_address(contract))


def token_contract_predicate(token_contract: Any) -> EventPredicate:
    """Match every event associated with ``token_contract``."""
    return EventPredicate(token_contract=canonical_address(token_contract))


def matching_event_predicate(
    contract: Any,
    token_contract: Any,
    chain_id: int,
    event_name: str,
    filter_name: str | None = None,
    filter_value: str | None = None,
) -> EventPredicate:
    """Build the composite key used by the store's lookups.

    Without a filter this is the four-clause conjunction of emitting
    contract, chain, token contract and event name. Passing ``filter_name``
    and ``filter_value`` adds the fifth clause selecting the
    ``"<filter_name>=<filter_value>"`` slot.

    Args:
        contract: Emitting contract address, any casing.
        token_contract: Token contract address, any casing.
        chain_id: Chain identifier.
        event_name: Event name.
        filter_name: Optional filter name; requires ``filter_value``.
        filter_value: Optional filter value; requires ``filter_name``.

    Returns:
        The predicate. Supplying only one half of the filter constrains the
        missing half to the empty string.

    Examples:
        >>> predicate = matching_event_predicate(
        ...     "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        ...     "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        ...     1,
        ...     "Transfer",
        ...     filter_name="tokenId",
        ...     filter_value="5",
        ... )
        >>> predicate.filter_name, predicate.filter_value
        ('tokenId', '5')
    """
    if filter_name is None and filter_value is None:
        return EventPredicate(
            contract=canonical_address(contract),
            token_contract=canonical_address(token_contract),
            chain_id=chain_id,
            event_name=event_name,
        )
    return EventPredicate(
        contract=canonical_address(contract),
        token_contract=canonical_address(token_contract),
        chain_id=chain_id,
        event_name=event_name,
        filter_name=filter_name or "",
        filter_value=filter_value or "",
    )
