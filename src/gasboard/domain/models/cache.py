"""Cache models for derived per-day fee state."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class DayRecord:
    """
    Persisted fee aggregate per (address, local date).

    tx_count is the number of on-ledger transactions observed for that day at
    the last successful aggregation; a mismatch with a fresh scan means the
    record is stale. Never edit partially; always recompute the whole day.
    """

    address: str
    date: str
    tx_count: int = 0
    # None when written without a native fee; unknown rather than zero
    fee_native: Optional[Decimal] = field(default_factory=lambda: Decimal("0"))
    fee_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    fee_local: Decimal = field(default_factory=lambda: Decimal("0"))
    price_estimated: bool = False
    updated_at: Optional[datetime] = field(default=None)
