"""View models for aggregation and month outputs."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from gasboard.domain.models import LAMPORTS_PER_SOL


@dataclass
class DayBucket:
    """Fee sums of one local day, as folded by the Aggregator."""

    date: str
    tx_count: int = 0
    fee_lamports: int = 0
    fee_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    estimated_count: int = 0

    @property
    def fee_native(self) -> Decimal:
        """Fee sum in SOL."""
        return Decimal(self.fee_lamports) / LAMPORTS_PER_SOL

    @property
    def price_estimated(self) -> bool:
        return self.estimated_count > 0


@dataclass
class DayView:
    """
    One calendar day of a MonthView.

    Fees are None when the day has transactions but is not synced, so a
    stale or failed day never reads as confirmed zero. A synced day may
    still carry fee_native=None when its record was written without one.
    """

    date: str
    tx_count: int
    is_synced: bool
    fee_native: Optional[Decimal] = None
    fee_usd: Optional[Decimal] = None
    fee_local: Optional[Decimal] = None
    price_estimated: bool = False
    error: Optional[str] = None


@dataclass
class MonthView:
    """Day-indexed fee view of one address for one month."""

    address: str
    year_month: str
    days: list[DayView] = field(default_factory=list)
    truncated: bool = False
    local_currency: str = "CNY"

    def get_day(self, date: str) -> Optional[DayView]:
        for day in self.days:
            if day.date == date:
                return day
        return None

    @property
    def active_days(self) -> int:
        return sum(1 for d in self.days if d.tx_count > 0)

    @property
    def synced_days(self) -> int:
        """Active days whose numbers are authoritative."""
        return sum(1 for d in self.days if d.tx_count > 0 and d.is_synced)

    @property
    def is_complete(self) -> bool:
        return not self.truncated and self.synced_days == self.active_days

    @property
    def total_fee_usd(self) -> Decimal:
        """Sum over synced active days only."""
        return sum(
            (d.fee_usd for d in self.days if d.tx_count > 0 and d.is_synced and d.fee_usd is not None),
            Decimal("0"),
        )

    @property
    def total_fee_local(self) -> Decimal:
        return sum(
            (d.fee_local for d in self.days if d.tx_count > 0 and d.is_synced and d.fee_local is not None),
            Decimal("0"),
        )
