"""Response schemas for upstream endpoints, validated at the boundary."""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel


class RpcError(BaseModel):
    """JSON-RPC error object."""

    code: int = 0
    message: str = "Unknown RPC error"


class RpcEnvelope(BaseModel):
    """JSON-RPC 2.0 response envelope."""

    jsonrpc: str = "2.0"
    id: Optional[Any] = None
    result: Optional[Any] = None
    error: Optional[RpcError] = None


class SignatureInfo(BaseModel):
    """Item of a getSignaturesForAddress result."""

    model_config = ConfigDict(populate_by_name=True)

    signature: str
    slot: Optional[int] = None
    block_time: Optional[int] = Field(default=None, alias="blockTime")
    err: Optional[Any] = None


class TransactionMeta(BaseModel):
    """Subset of getTransaction meta used for fee aggregation."""

    fee: int = Field(ge=0)
    err: Optional[Any] = None


class TransactionResponse(BaseModel):
    """Subset of a getTransaction result."""

    model_config = ConfigDict(populate_by_name=True)

    slot: Optional[int] = None
    block_time: Optional[int] = Field(default=None, alias="blockTime")
    meta: Optional[TransactionMeta] = None


class Kline(BaseModel):
    """
    Binance kline row.

    Raw rows are positional arrays:
    [open_time, open, high, low, close, volume, close_time, ...].
    """

    open_time: int
    open: Decimal = Field(gt=0)
    close: Decimal = Field(gt=0)
    close_time: int

    @classmethod
    def from_row(cls, row: list) -> "Kline":
        return cls(open_time=row[0], open=row[1], close=row[4], close_time=row[6])


class CoinMarketData(BaseModel):
    current_price: dict[str, Decimal] = Field(default_factory=dict)


class CoinHistoryResponse(BaseModel):
    """Coingecko /coins/{id}/history response."""

    id: Optional[str] = None
    market_data: Optional[CoinMarketData] = None


class ExchangeRateResponse(BaseModel):
    """open.er-api.com /v6/latest/{base} response."""

    result: Optional[str] = None
    base_code: Optional[str] = None
    rates: dict[str, Decimal] = Field(default_factory=dict)


class SimplePriceResponse(RootModel[dict[str, dict[str, Decimal]]]):
    """Coingecko /simple/price response: {coin_id: {vs_currency: price}}."""

    def price_of(self, coin_id: str, vs_currency: str = "usd") -> Optional[Decimal]:
        return (self.root.get(coin_id) or {}).get(vs_currency)
