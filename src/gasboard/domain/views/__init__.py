"""View models for service outputs."""

from gasboard.domain.views.month import (
    DayBucket,
    DayView,
    MonthView,
)

__all__ = [
    "DayBucket",
    "DayView",
    "MonthView",
]
