"""Core utilities and shared functionality."""

from gasboard.core.timezone import (
    now_utc,
    get_local_tz,
    local_date_for,
    month_days,
    month_window,
    day_window,
    parse_year_month,
    parse_day,
)
from gasboard.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    InvalidAddressError,
    RateLimitedError,
    TransportError,
    PartialDataLossError,
    PriceUnavailableError,
    SyncFailedError,
)
from gasboard.core.retry import RetryPolicy

__all__ = [
    "now_utc",
    "get_local_tz",
    "local_date_for",
    "month_days",
    "month_window",
    "day_window",
    "parse_year_month",
    "parse_day",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "InvalidAddressError",
    "RateLimitedError",
    "TransportError",
    "PartialDataLossError",
    "PriceUnavailableError",
    "SyncFailedError",
    "RetryPolicy",
]
