"""Domain models package."""

from gasboard.domain.models.records import (
    LAMPORTS_PER_SOL,
    SignatureRecord,
    TransactionRecord,
    PriceCandle,
    PriceSource,
    PriceQuote,
    RateQuote,
)
from gasboard.domain.models.cache import DayRecord

__all__ = [
    "LAMPORTS_PER_SOL",
    "SignatureRecord",
    "TransactionRecord",
    "PriceCandle",
    "PriceSource",
    "PriceQuote",
    "RateQuote",
    "DayRecord",
]
