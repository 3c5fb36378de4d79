"""Gas-data API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from gasboard.api.deps import get_orchestrator, get_sync_cache
from gasboard.api.schemas.gas_data import (
    DayRecordResponse,
    GasDataResponse,
    GasDataWriteRequest,
    GasDayData,
    MonthViewResponse,
    RecomputeRequest,
    SuccessResponse,
)
from gasboard.core.address import validate_address
from gasboard.core.exceptions import ValidationError
from gasboard.core.timezone import parse_day, parse_year_month
from gasboard.services import SyncCache, SyncOrchestrator

router = APIRouter(prefix="/gas-data", tags=["gas-data"])


@router.get("", response_model=GasDataResponse)
def get_cached_month(
    address: Optional[str] = Query(None),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    cache: SyncCache = Depends(get_sync_cache),
):
    """Cached day records of one month, without touching the ledger."""
    if not address or not month:
        raise ValidationError("Missing address or month")
    address = validate_address(address)
    parse_year_month(month)

    records = cache.read_month(address, month)
    return GasDataResponse(
        data={
            day: GasDayData(
                tx_count=r.tx_count,
                fee_usd=float(r.fee_usd),
                fee_local=float(r.fee_local),
            )
            for day, r in sorted(records.items())
        }
    )


@router.post("", response_model=SuccessResponse)
def write_cached_day(
    data: GasDataWriteRequest,
    cache: SyncCache = Depends(get_sync_cache),
):
    """Store externally computed numbers for one day."""
    address = validate_address(data.address)
    parse_day(data.date)
    cache.upsert(
        address,
        data.date,
        tx_count=data.tx_count,
        fee_native=data.fee_native,
        fee_usd=data.fee_usd,
        fee_local=data.fee_local,
    )
    return SuccessResponse()


@router.get("/month", response_model=MonthViewResponse)
async def get_month_view(
    address: str = Query(..., description="Wallet address"),
    month: str = Query(..., description="YYYY-MM"),
    recompute: bool = Query(True, description="Aggregate stale days before returning"),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Sync and return the per-day fee view of a month."""
    view = await orchestrator.get_month_view(address, month, recompute=recompute)
    return MonthViewResponse.from_view(view)


@router.post("/recompute", response_model=DayRecordResponse)
async def recompute_day(
    data: RecomputeRequest,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Recompute one day from the ledger and overwrite its cache record."""
    record = await orchestrator.recompute_day(data.address, data.date)
    return DayRecordResponse.from_record(record)
