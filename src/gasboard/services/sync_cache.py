"""Read-modify-write cycle against the persisted per-day cache."""

import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from gasboard.core.timezone import now_utc
from gasboard.domain.models import DayRecord
from gasboard.repositories.protocols import DayCacheRepository

logger = logging.getLogger(__name__)

NATIVE_QUANT = Decimal("0.000000001")
USD_QUANT = Decimal("0.000001")
LOCAL_QUANT = Decimal("0.001")


def _quantize(value: Decimal, quant: Decimal) -> Decimal:
    return Decimal(value).quantize(quant, rounding=ROUND_HALF_UP)


class SyncCache:
    """
    Cache of per-(address, date) fee aggregates.

    A record is trusted only while its tx_count equals the freshly observed
    on-ledger count; confirmed history of a past day does not change, so a
    count mismatch is the staleness signal. record_matches() is that
    predicate: is_stale() applies it to one stored day, and month checks
    apply it to a single read_range() result.
    """

    def __init__(self, repo: DayCacheRepository):
        self._repo = repo

    def read_range(self, address: str, date_start: str, date_end: str) -> dict[str, DayRecord]:
        """Cached records keyed by date; no ledger access."""
        return {r.date: r for r in self._repo.get_range(address, date_start, date_end)}

    def read_month(self, address: str, year_month: str) -> dict[str, DayRecord]:
        return {r.date: r for r in self._repo.get_month(address, year_month)}

    @staticmethod
    def record_matches(record: Optional[DayRecord], observed_tx_count: int) -> bool:
        return record is not None and record.tx_count == observed_tx_count

    def is_stale(self, address: str, date: str, observed_tx_count: int) -> bool:
        """True iff there is no record or its tx_count differs from observed."""
        return not self.record_matches(self._repo.get(address, date), observed_tx_count)

    def upsert(
        self,
        address: str,
        date: str,
        tx_count: int,
        fee_native: Optional[Decimal],
        fee_usd: Decimal,
        fee_local: Decimal,
        price_estimated: bool = False,
    ) -> DayRecord:
        """
        Write the full record for one day.

        Fees are quantized (native 9dp, USD 6dp, local 3dp) so re-applying
        the same values stores the same state. A None fee_native is stored
        as unknown. updated_at never moves
        backwards for a key.
        """
        if tx_count < 0:
            raise ValueError("tx_count must be non-negative")

        updated_at = now_utc()
        existing = self._repo.get(address, date)
        if existing is not None and existing.updated_at is not None and existing.updated_at >= updated_at:
            updated_at = existing.updated_at + timedelta(microseconds=1)

        record = DayRecord(
            address=address,
            date=date,
            tx_count=tx_count,
            fee_native=_quantize(fee_native, NATIVE_QUANT) if fee_native is not None else None,
            fee_usd=_quantize(fee_usd, USD_QUANT),
            fee_local=_quantize(fee_local, LOCAL_QUANT),
            price_estimated=price_estimated,
            updated_at=updated_at,
        )
        stored = self._repo.upsert(record)
        logger.info(
            "Cached %s %s: %d txs, %s USD, %s local",
            address,
            date,
            stored.tx_count,
            stored.fee_usd,
            stored.fee_local,
        )
        return stored
