"""Price oracle: SOL/USD at an instant and USD/local rate, with fallbacks."""

import bisect
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from gasboard.core.exceptions import AppError
from gasboard.core.retry import RetryPolicy
from gasboard.domain.models import PriceCandle, PriceQuote, PriceSource, RateQuote
from gasboard.providers.price_feed_provider import PriceFeedProvider

logger = logging.getLogger(__name__)


class PriceOracle:
    """
    Resolves the USD value of one SOL at a transaction timestamp.

    Lookup order for price_at():
    1. containing candle of the pre-fetched series (midpoint of open/close)
    2. historical daily price for the UTC date (cached per date)
    3. spot price (fetched once)
    4. configured default, flagged as an estimate

    Never raises for a missing price; every failure degrades to the next
    source. Call prepare() at the start of each sync run to reset state.
    """

    def __init__(
        self,
        feed: PriceFeedProvider,
        default_price: Decimal = Decimal("85"),
        default_usd_to_local: Decimal = Decimal("7.25"),
        local_currency: str = "CNY",
        policy: Optional[RetryPolicy] = None,
    ):
        self._feed = feed
        self._default_price = default_price
        self._default_usd_to_local = default_usd_to_local
        self._local_currency = local_currency
        self._policy = policy or RetryPolicy(name="price_lookup", max_attempts=2)
        self._reset()

    def _reset(self) -> None:
        self._series: list[PriceCandle] = []
        self._series_opens: list[int] = []
        # None records a failed lookup so it is not retried within the run
        self._historical: dict[date, Optional[Decimal]] = {}
        self._spot: Optional[Decimal] = None
        self._spot_loaded = False
        self._rate: Optional[RateQuote] = None

    @property
    def local_currency(self) -> str:
        return self._local_currency

    async def price_series(self, start_ts: int, end_ts: int) -> list[PriceCandle]:
        """Fetch interval candles covering [start_ts, end_ts] (unix seconds)."""
        candles = await self._policy.run(self._feed.get_candles, start_ts * 1000, end_ts * 1000)
        return sorted(candles, key=lambda c: c.open_time_ms)

    def load_series(self, candles: list[PriceCandle]) -> None:
        """Install a pre-fetched candle series."""
        self._series = sorted(candles, key=lambda c: c.open_time_ms)
        self._series_opens = [c.open_time_ms for c in self._series]

    async def prepare(self, start_ts: int, end_ts: int) -> None:
        """
        Best-effort warm-up for a sync window.

        Loads the candle series, spot price and exchange rate. Failures are
        logged and leave the oracle on its fallback chain.
        """
        self._reset()
        try:
            self.load_series(await self.price_series(start_ts, end_ts))
            logger.info("Loaded %d price candles", len(self._series))
        except AppError as exc:
            logger.warning("Price series unavailable, using fallbacks: %s", exc)
        await self._spot_price()
        await self.usd_to_local()

    def _series_price(self, timestamp: int) -> Optional[Decimal]:
        if not self._series:
            return None
        ts_ms = timestamp * 1000
        idx = bisect.bisect_right(self._series_opens, ts_ms) - 1
        if idx >= 0 and self._series[idx].contains(ts_ms):
            return self._series[idx].midpoint
        return None

    async def _historical_price(self, day: date) -> Optional[Decimal]:
        if day in self._historical:
            return self._historical[day]
        try:
            price = await self._policy.run(self._feed.get_historical_price, day)
        except AppError as exc:
            logger.warning("Historical price for %s unavailable: %s", day, exc)
            price = None
        self._historical[day] = price
        return price

    async def _spot_price(self) -> Optional[Decimal]:
        if not self._spot_loaded:
            self._spot_loaded = True
            try:
                self._spot = await self._policy.run(self._feed.get_spot_price)
            except AppError as exc:
                logger.warning("Spot price unavailable: %s", exc)
                self._spot = None
        return self._spot

    async def price_at(self, timestamp: int) -> PriceQuote:
        """USD price of one SOL at a unix timestamp."""
        price = self._series_price(timestamp)
        if price is not None:
            return PriceQuote(price=price, source=PriceSource.SERIES)

        day = datetime.fromtimestamp(timestamp, tz=timezone.utc).date()
        price = await self._historical_price(day)
        if price is not None:
            return PriceQuote(price=price, source=PriceSource.HISTORICAL)

        price = await self._spot_price()
        if price is not None:
            return PriceQuote(price=price, source=PriceSource.SPOT)

        return PriceQuote(price=self._default_price, source=PriceSource.DEFAULT)

    async def usd_to_local(self) -> RateQuote:
        """USD -> local currency rate, fetched once per run."""
        if self._rate is None:
            try:
                rate = await self._policy.run(self._feed.get_usd_rate, self._local_currency)
                self._rate = RateQuote(rate=rate, is_estimate=False)
            except AppError as exc:
                logger.warning(
                    "USD->%s rate unavailable, using default %s: %s",
                    self._local_currency,
                    self._default_usd_to_local,
                    exc,
                )
                self._rate = RateQuote(rate=self._default_usd_to_local, is_estimate=True)
        return self._rate
