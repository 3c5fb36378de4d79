"""Bounded-concurrency fetch of transaction bodies."""

import asyncio
import logging
from typing import Optional, Sequence

from gasboard.core.exceptions import AppError
from gasboard.core.retry import RetryPolicy
from gasboard.domain.models import TransactionRecord
from gasboard.providers.ledger_provider import LedgerProvider

logger = logging.getLogger(__name__)


class TransactionBatcher:
    """
    Fetches transaction records in fixed-size batches.

    Requests inside a batch run concurrently; batches run one after another
    with a pacing delay. A signature whose fetch fails or has no body is
    omitted from the result, so callers must treat omissions as unknown.
    """

    def __init__(
        self,
        ledger: LedgerProvider,
        policy: Optional[RetryPolicy] = None,
        batch_size: int = 5,
        batch_delay_seconds: float = 0.2,
    ):
        self._ledger = ledger
        self._policy = policy or RetryPolicy(name="batch_item")
        self._batch_size = batch_size
        self._batch_delay = batch_delay_seconds

    async def fetch_bodies(
        self,
        signatures: Sequence[str],
        batch_size: Optional[int] = None,
    ) -> list[TransactionRecord]:
        """Fetch bodies for signatures; partial results are returned."""
        unique = list(dict.fromkeys(signatures))
        size = max(1, batch_size or self._batch_size)
        records: list[TransactionRecord] = []

        for offset in range(0, len(unique), size):
            if offset and self._batch_delay:
                await asyncio.sleep(self._batch_delay)
            batch = unique[offset:offset + size]
            results = await asyncio.gather(*(self._fetch_one(sig) for sig in batch))
            records.extend(r for r in results if r is not None)
            logger.debug("Fetched %d / %d transaction bodies", min(offset + size, len(unique)), len(unique))

        missing = len(unique) - len(records)
        if missing:
            logger.warning("%d of %d transaction bodies unavailable", missing, len(unique))
        return records

    async def _fetch_one(self, signature: str) -> Optional[TransactionRecord]:
        try:
            record = await self._policy.run(self._ledger.get_transaction, signature)
        except AppError as exc:
            logger.warning("Skipping transaction %s: %s", signature, exc)
            return None
        if record is None:
            logger.warning("No body returned for transaction %s", signature)
        return record
