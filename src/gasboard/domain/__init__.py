"""Domain layer - sync records, cache entities and views with no I/O."""

from gasboard.domain.models import (
    SignatureRecord,
    TransactionRecord,
    PriceCandle,
    PriceQuote,
    RateQuote,
    DayRecord,
)
from gasboard.domain.views import DayBucket, DayView, MonthView

__all__ = [
    "SignatureRecord",
    "TransactionRecord",
    "PriceCandle",
    "PriceQuote",
    "RateQuote",
    "DayRecord",
    "DayBucket",
    "DayView",
    "MonthView",
]
