"""Pydantic schemas for API request/response."""

from gasboard.api.schemas.gas_data import (
    GasDayData,
    GasDataResponse,
    GasDataWriteRequest,
    SuccessResponse,
    RecomputeRequest,
    DayRecordResponse,
    DayViewResponse,
    MonthViewResponse,
)

__all__ = [
    "GasDayData",
    "GasDataResponse",
    "GasDataWriteRequest",
    "SuccessResponse",
    "RecomputeRequest",
    "DayRecordResponse",
    "DayViewResponse",
    "MonthViewResponse",
]
