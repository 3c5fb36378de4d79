"""Solana address validation."""

import re

from gasboard.core.exceptions import InvalidAddressError

# Base58 alphabet (no 0, O, I, l); 32-byte keys encode to 32-44 chars
_BASE58_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_valid_address(address: str) -> bool:
    """Check that address looks like a base58 Solana public key."""
    return isinstance(address, str) and bool(_BASE58_ADDRESS_RE.match(address))


def validate_address(address: str) -> str:
    """Return the stripped address or raise InvalidAddressError."""
    candidate = address.strip() if isinstance(address, str) else address
    if not is_valid_address(candidate):
        raise InvalidAddressError(str(address))
    return candidate
