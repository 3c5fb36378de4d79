"""Price feed provider protocol."""

from datetime import date
from decimal import Decimal
from typing import Protocol

from gasboard.domain.models import PriceCandle


class PriceFeedProvider(Protocol):
    """
    Protocol for SOL/USD and USD/local price sources.

    Implementations make single attempts and raise RateLimitedError,
    TransportError or PriceUnavailableError; fallback and retry live in
    PriceOracle.
    """

    async def get_candles(self, start_ms: int, end_ms: int) -> list[PriceCandle]:
        """Interval candles covering [start_ms, end_ms], oldest first."""
        ...

    async def get_historical_price(self, day: date) -> Decimal:
        """USD price of one SOL on a UTC date."""
        ...

    async def get_spot_price(self) -> Decimal:
        """Current USD price of one SOL."""
        ...

    async def get_usd_rate(self, currency: str) -> Decimal:
        """Units of `currency` per USD."""
        ...
