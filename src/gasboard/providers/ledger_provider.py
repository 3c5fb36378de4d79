"""Ledger provider protocol."""

from typing import Optional, Protocol

from gasboard.domain.models import TransactionRecord
from gasboard.providers.schemas import SignatureInfo


class LedgerProvider(Protocol):
    """
    Protocol for read-only ledger access.

    Implementations raise RateLimitedError or TransportError on failure and
    perform a single attempt per call.
    """

    async def get_signatures_for_address(
        self,
        address: str,
        limit: int = 1000,
        before: Optional[str] = None,
    ) -> list[SignatureInfo]:
        """Return one page of signatures (newest first) older than `before`."""
        ...

    async def get_transaction(self, signature: str) -> Optional[TransactionRecord]:
        """Return the transaction record, or None when no body is available."""
        ...
