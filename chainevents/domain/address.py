"""Canonical address handling for contract and token-contract attributes."""

from typing import Annotated, Any

from pydantic import AfterValidator
from web3 import Web3


def checksum_address(value: str) -> str:
    """Convert an address to its EIP-55 checksummed form.

    Args:
        value: Hex address in any casing, with the ``0x`` prefix.

    Returns:
        The checksummed address string.

    Raises:
        ValueError: If the value is not a 20-byte hex address.
    """
    try:
        return Web3.to_checksum_address(value)
    except TypeError as err:
        raise ValueError(f"Not a valid address: {value!r}") from err


def canonical_address(value: Any) -> str:
    """Normalize an address for comparison without ever failing.

    Valid addresses are checksummed so that differently-cased spellings of
    the same address compare equal. Anything else is returned as its plain
    string form, which never equals a stored (checksummed) address.

    Examples:
        >>> canonical_address("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")
        '0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed'
        >>> canonical_address("not-an-address")
        'not-an-address'
    """
    try:
        return checksum_address(value)
    except (TypeError, ValueError):
        return str(value)


Address = Annotated[str, AfterValidator(checksum_address)]
"""String address validated and stored in checksummed form."""
