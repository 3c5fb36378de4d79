"""HTTP price feeds: klines, historical/spot SOL price and USD exchange rates."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import httpx

from gasboard.core.exceptions import PriceUnavailableError, RateLimitedError, TransportError
from gasboard.domain.models import PriceCandle
from gasboard.providers.schemas import (
    CoinHistoryResponse,
    ExchangeRateResponse,
    Kline,
    SimplePriceResponse,
)

logger = logging.getLogger(__name__)

KLINE_PAGE_LIMIT = 1000


class HttpPriceFeed:
    """
    Price feed backed by public HTTP endpoints.

    - candles: Binance /api/v3/klines
    - historical and spot price: Coingecko
    - USD exchange rates: open.er-api.com

    Each method makes single attempts; failures raise RateLimitedError,
    TransportError or PriceUnavailableError.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        kline_url: str = "https://api.binance.com/api/v3/klines",
        kline_symbol: str = "SOLUSDT",
        kline_interval: str = "1h",
        coingecko_url: str = "https://api.coingecko.com/api/v3",
        coin_id: str = "solana",
        exchange_rate_url: str = "https://open.er-api.com/v6/latest/USD",
    ):
        self._http = http
        self._kline_url = kline_url
        self._kline_symbol = kline_symbol
        self._kline_interval = kline_interval
        self._coingecko_url = coingecko_url.rstrip("/")
        self._coin_id = coin_id
        self._exchange_rate_url = exchange_rate_url

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        try:
            response = await self._http.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise TransportError(f"GET {url} timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitedError(f"GET {url} rate limited")
        if response.status_code >= 400:
            raise TransportError(f"GET {url} failed: HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"GET {url} returned malformed JSON") from exc

    async def get_candles(self, start_ms: int, end_ms: int) -> list[PriceCandle]:
        """Candles covering [start_ms, end_ms], oldest first."""
        candles: list[PriceCandle] = []
        page_start = start_ms
        while page_start <= end_ms:
            rows = await self._get_json(
                self._kline_url,
                params={
                    "symbol": self._kline_symbol,
                    "interval": self._kline_interval,
                    "startTime": page_start,
                    "endTime": end_ms,
                    "limit": KLINE_PAGE_LIMIT,
                },
            )
            if not isinstance(rows, list):
                raise TransportError("klines returned a non-list payload")
            try:
                klines = [Kline.from_row(row) for row in rows]
            except (ValueError, IndexError, TypeError) as exc:
                raise TransportError(f"klines returned malformed rows: {exc}") from exc

            candles.extend(
                PriceCandle(
                    open_time_ms=k.open_time,
                    close_time_ms=k.close_time,
                    open=k.open,
                    close=k.close,
                )
                for k in klines
            )
            if len(klines) < KLINE_PAGE_LIMIT:
                break
            next_start = klines[-1].close_time + 1
            if next_start <= page_start:
                break
            page_start = next_start
        return candles

    async def get_historical_price(self, day: date) -> Decimal:
        """USD price on a UTC date (Coingecko daily snapshot)."""
        payload = await self._get_json(
            f"{self._coingecko_url}/coins/{self._coin_id}/history",
            params={"date": day.strftime("%d-%m-%Y"), "localization": "false"},
        )
        try:
            history = CoinHistoryResponse.model_validate(payload)
        except ValueError as exc:
            raise TransportError(f"history returned malformed payload: {exc}") from exc
        price = history.market_data.current_price.get("usd") if history.market_data else None
        if price is None or price <= 0:
            raise PriceUnavailableError(f"No historical price for {self._coin_id} on {day}")
        return price

    async def get_spot_price(self) -> Decimal:
        """Current USD price."""
        payload = await self._get_json(
            f"{self._coingecko_url}/simple/price",
            params={"ids": self._coin_id, "vs_currencies": "usd"},
        )
        try:
            price = SimplePriceResponse.model_validate(payload).price_of(self._coin_id)
        except ValueError as exc:
            raise TransportError(f"simple/price returned malformed payload: {exc}") from exc
        if price is None or price <= 0:
            raise PriceUnavailableError(f"No spot price for {self._coin_id}")
        return price

    async def get_usd_rate(self, currency: str) -> Decimal:
        """How many units of `currency` one USD buys."""
        payload = await self._get_json(self._exchange_rate_url)
        try:
            rates = ExchangeRateResponse.model_validate(payload)
        except ValueError as exc:
            raise TransportError(f"exchange rates returned malformed payload: {exc}") from exc
        rate = rates.rates.get(currency.upper())
        if rate is None or rate <= 0:
            raise PriceUnavailableError(f"No USD->{currency} rate available")
        return rate
