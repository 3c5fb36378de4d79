"""Pydantic schemas for gas-data endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from gasboard.domain.models import DayRecord
from gasboard.domain.views import DayView, MonthView


class GasDayData(BaseModel):
    """Cached numbers of one day, as served by GET /gas-data."""

    tx_count: int
    fee_usd: float
    fee_local: float


class GasDataResponse(BaseModel):
    """Response schema for the cached month listing."""

    success: bool = True
    data: dict[str, GasDayData]


class GasDataWriteRequest(BaseModel):
    """Request schema for writing one day into the cache."""

    address: str = Field(..., min_length=1, description="Wallet address")
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Local date YYYY-MM-DD")
    tx_count: int = Field(..., ge=0)
    fee_native: Optional[Decimal] = Field(default=None, ge=0, description="Fee sum in SOL, unknown when omitted")
    fee_usd: Decimal = Field(..., ge=0)
    fee_local: Decimal = Field(..., ge=0)

    @field_validator("address")
    @classmethod
    def strip_address(cls, v: str) -> str:
        return v.strip()


class SuccessResponse(BaseModel):
    success: bool = True


class RecomputeRequest(BaseModel):
    """Request schema for recomputing one day."""

    address: str = Field(..., min_length=1)
    date: str = Field(..., description="Local date YYYY-MM-DD")


class DayRecordResponse(BaseModel):
    """Response schema for a cached day record."""

    address: str
    date: str
    tx_count: int
    fee_native: Optional[Decimal] = None
    fee_usd: Decimal
    fee_local: Decimal
    price_estimated: bool
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: DayRecord) -> "DayRecordResponse":
        return cls(
            address=record.address,
            date=record.date,
            tx_count=record.tx_count,
            fee_native=record.fee_native,
            fee_usd=record.fee_usd,
            fee_local=record.fee_local,
            price_estimated=record.price_estimated,
            updated_at=record.updated_at,
        )


class DayViewResponse(BaseModel):
    """Response schema for one day of a month view."""

    date: str
    tx_count: int
    is_synced: bool
    fee_native: Optional[Decimal] = None
    fee_usd: Optional[Decimal] = None
    fee_local: Optional[Decimal] = None
    price_estimated: bool = False
    error: Optional[str] = None

    @classmethod
    def from_view(cls, view: DayView) -> "DayViewResponse":
        return cls(
            date=view.date,
            tx_count=view.tx_count,
            is_synced=view.is_synced,
            fee_native=view.fee_native,
            fee_usd=view.fee_usd,
            fee_local=view.fee_local,
            price_estimated=view.price_estimated,
            error=view.error,
        )


class MonthViewResponse(BaseModel):
    """Response schema for a month view with synced-day totals."""

    address: str
    month: str
    local_currency: str
    truncated: bool
    active_days: int
    synced_days: int
    total_fee_usd: Decimal
    total_fee_local: Decimal
    days: list[DayViewResponse]

    @classmethod
    def from_view(cls, view: MonthView) -> "MonthViewResponse":
        return cls(
            address=view.address,
            month=view.year_month,
            local_currency=view.local_currency,
            truncated=view.truncated,
            active_days=view.active_days,
            synced_days=view.synced_days,
            total_fee_usd=view.total_fee_usd,
            total_fee_local=view.total_fee_local,
            days=[DayViewResponse.from_view(d) for d in view.days],
        )
