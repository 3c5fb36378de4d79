"""Backward walk over an address's signature history."""

import asyncio
import logging
from typing import AsyncIterator, Optional

from gasboard.core.retry import RetryPolicy
from gasboard.core.timezone import TzLike, get_local_tz, local_date_for
from gasboard.domain.models import SignatureRecord
from gasboard.providers.ledger_provider import LedgerProvider

logger = logging.getLogger(__name__)


class SignaturePaginator:
    """
    Pages through getSignaturesForAddress newest-to-oldest.

    After (or during) a run, `cursor` holds the oldest signature of the last
    fully consumed page, so a failed walk can be resumed with before=cursor.
    `truncated` is set when the walk stopped on max_count or max_pages
    rather than on exhausted history or the window start.
    """

    def __init__(
        self,
        ledger: LedgerProvider,
        local_tz: TzLike = "Asia/Shanghai",
        policy: Optional[RetryPolicy] = None,
        page_limit: int = 1000,
        page_delay_seconds: float = 0.2,
        max_pages: int = 50,
    ):
        self._ledger = ledger
        self._tz = get_local_tz(local_tz)
        self._policy = policy or RetryPolicy(name="scan_page")
        self._page_limit = page_limit
        self._page_delay = page_delay_seconds
        self._max_pages = max_pages

        self.cursor: Optional[str] = None
        self.truncated = False
        self.pages_fetched = 0

    async def fetch_signatures(
        self,
        address: str,
        window_start: int,
        window_end: int,
        max_count: int,
        before: Optional[str] = None,
    ) -> AsyncIterator[SignatureRecord]:
        """
        Yield signatures with window_start <= blockTime <= window_end.

        Signatures without a blockTime advance the cursor but are never
        yielded. Raises RateLimitedError/TransportError once the page
        policy is exhausted.
        """
        self.cursor = before
        self.truncated = False
        self.pages_fetched = 0
        seen: set[str] = set()
        emitted = 0

        while True:
            if self.pages_fetched >= self._max_pages:
                logger.warning(
                    "Signature scan for %s stopped after %d pages", address, self.pages_fetched
                )
                self.truncated = True
                return
            if self.pages_fetched and self._page_delay:
                await asyncio.sleep(self._page_delay)

            page = await self._policy.run(
                self._ledger.get_signatures_for_address,
                address,
                self._page_limit,
                self.cursor,
            )
            self.pages_fetched += 1
            if not page:
                return

            reached_start = False
            for info in page:
                if info.signature in seen:
                    continue
                seen.add(info.signature)
                if info.block_time is None:
                    continue
                if info.block_time < window_start:
                    reached_start = True
                    break
                if info.block_time > window_end:
                    continue
                if emitted >= max_count:
                    logger.warning(
                        "Signature scan for %s hit the %d transaction cap", address, max_count
                    )
                    self.truncated = True
                    return
                emitted += 1
                yield SignatureRecord(
                    signature=info.signature,
                    block_time=info.block_time,
                    local_date=local_date_for(info.block_time, self._tz),
                )

            next_cursor = page[-1].signature
            if next_cursor == self.cursor:
                return
            self.cursor = next_cursor
            if reached_start or len(page) < self._page_limit:
                return
