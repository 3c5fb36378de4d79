"""Ledger and price records produced during a sync run (not persisted)."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

LAMPORTS_PER_SOL = Decimal("1000000000")


@dataclass(frozen=True)
class SignatureRecord:
    """One signature from an address's history, bucketed to a local date."""

    signature: str
    block_time: Optional[int]
    local_date: str


@dataclass(frozen=True)
class TransactionRecord:
    """
    Fetched transaction body reduced to what fee aggregation needs.

    fee_lamports is in the ledger's smallest unit.
    """

    signature: str
    block_time: Optional[int]
    fee_lamports: int
    succeeded: bool = True

    @property
    def fee_native(self) -> Decimal:
        """Fee in SOL."""
        return Decimal(self.fee_lamports) / LAMPORTS_PER_SOL


@dataclass(frozen=True)
class PriceCandle:
    """Kline covering [open_time_ms, close_time_ms]."""

    open_time_ms: int
    close_time_ms: int
    open: Decimal
    close: Decimal

    @property
    def midpoint(self) -> Decimal:
        return (self.open + self.close) / 2

    def contains(self, timestamp_ms: int) -> bool:
        return self.open_time_ms <= timestamp_ms <= self.close_time_ms


class PriceSource(str, Enum):
    """Where a price came from, in fallback order."""

    SERIES = "SERIES"
    HISTORICAL = "HISTORICAL"
    SPOT = "SPOT"
    DEFAULT = "DEFAULT"


@dataclass(frozen=True)
class PriceQuote:
    """Resolved SOL/USD price and its provenance."""

    price: Decimal
    source: PriceSource

    @property
    def is_estimate(self) -> bool:
        return self.source == PriceSource.DEFAULT


@dataclass(frozen=True)
class RateQuote:
    """USD -> local currency exchange rate."""

    rate: Decimal
    is_estimate: bool = False
