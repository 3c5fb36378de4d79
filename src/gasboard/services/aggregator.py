"""Fold transactions into local-day fee buckets."""

from typing import Iterable

from gasboard.core.timezone import TzLike, get_local_tz, local_date_for
from gasboard.domain.models import TransactionRecord
from gasboard.domain.views import DayBucket
from gasboard.services.price_oracle import PriceOracle


class Aggregator:
    """
    Groups transactions by the wallet's local calendar day.

    Day boundaries use the configured local timezone, matching the cache's
    day key. Transactions without a timestamp cannot be bucketed and are
    skipped.
    """

    def __init__(self, local_tz: TzLike = "Asia/Shanghai"):
        self._tz = get_local_tz(local_tz)

    async def aggregate(
        self,
        transactions: Iterable[TransactionRecord],
        price_oracle: PriceOracle,
    ) -> dict[str, DayBucket]:
        """Return {local_date: DayBucket} with counts, lamports and USD sums."""
        buckets: dict[str, DayBucket] = {}
        for txn in transactions:
            if txn.block_time is None:
                continue
            day = local_date_for(txn.block_time, self._tz)
            quote = await price_oracle.price_at(txn.block_time)

            bucket = buckets.setdefault(day, DayBucket(date=day))
            bucket.tx_count += 1
            bucket.fee_lamports += txn.fee_lamports
            bucket.fee_usd += txn.fee_native * quote.price
            if quote.is_estimate:
                bucket.estimated_count += 1
        return buckets
