from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .address import Address


class EventFilter(BaseModel):
    """Name/value refinement selecting one logical slot of an event type.

    Filters used to be persisted as a single ``"<name>=<value>"`` string.
    They are now kept as two explicit attributes so that a value containing
    ``=`` stays unambiguous; the legacy form is still derived for stored
    records that rely on it.

    Examples:
        >>> EventFilter(name="tokenId", value="5").legacy
        'tokenId=5'
        >>> EventFilter.parse("label=a=b")
        EventFilter(name='label', value='a=b')
        >>> EventFilter.parse("") is None
        True
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Name of the decoded field the filter selects on")
    value: str = Field(description="Expected value of that field, as a string")

    @property
    def legacy(self) -> str:
        """The single-string ``name=value`` encoding."""
        return f"{self.name}={self.value}"

    @classmethod
    def parse(cls, legacy: str) -> "EventFilter | None":
        """Decode a legacy filter string.

        Splits on the first ``=`` only. An empty string means the record
        carries no filter.

        Raises:
            ValueError: If a non-empty string has no ``=`` separator.
        """
        if not legacy:
            return None
        name, separator, value = legacy.partition("=")
        if not separator:
            raise ValueError(f"Filter {legacy!r} is not of the form name=value")
        return cls(name=name, value=value)


class EventInstanceValue(BaseModel):
    """Immutable snapshot of one decoded contract-event occurrence.

    Values are what producers hand to the store and what every query hands
    back. A returned value is a detached copy: it holds no reference into
    the store and is unaffected by later writes or deletions.

    Attributes:
        contract: Address that emitted the event, checksummed.
        token_contract: Token contract the event is indexed under. May differ
            from ``contract``.
        chain_id: Numeric chain identifier.
        event_name: Name of the event in the contract ABI.
        block_number: Block that included the event; primary ordering key.
        log_index: Position of the log within its block; breaks ties between
            events of the same block.
        filter: Optional slot refinement, see EventFilter.
        data: Decoded event fields. Carried through untouched.
        key: Identity chosen by the producer. When omitted the identity is
            derived from the event coordinates, see ``primary_key``.

    Examples:
        >>> event = EventInstanceValue(
        ...     contract="0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        ...     token_contract="0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        ...     chain_id=1,
        ...     event_name="Transfer",
        ...     block_number=100,
        ... )
        >>> event.contract
        '0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed'
    """

    model_config = ConfigDict(frozen=True)

    contract: Address = Field(description="Emitting contract address (EIP-55)")
    token_contract: Address = Field(description="Associated token contract address (EIP-55)")
    chain_id: int = Field(ge=0, description="Numeric chain identifier")
    event_name: str = Field(description="Event name as declared in the contract ABI")
    block_number: int = Field(ge=0, description="Block height of the event")
    log_index: int = Field(default=0, ge=0, description="Log position within the block")
    filter: EventFilter | None = Field(default=None, description="Optional slot refinement")
    data: dict[str, Any] = Field(default_factory=dict, description="Decoded event fields")
    key: str | None = Field(default=None, description="Producer-chosen identity")

    @property
    def legacy_filter(self) -> str:
        """Filter in its ``name=value`` string form, empty when unfiltered."""
        return self.filter.legacy if self.filter is not None else ""

    @property
    def primary_key(self) -> str:
        """Storage identity of this event.

        Two values with the same primary key are the same record: writing the
        second replaces the first.
        """
        if self.key is not None:
            return self.key
        return "-".join(
            [
                self.contract,
                self.token_contract,
                str(self.chain_id),
                self.event_name,
                str(self.block_number),
                str(self.log_index),
                self.legacy_filter,
            ]
        )

    @property
    def position(self) -> tuple[int, int]:
        """Ordering key: block number, then log index."""
        return (self.block_number, self.log_index)
