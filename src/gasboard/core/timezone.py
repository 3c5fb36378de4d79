"""Timezone and calendar utilities for local-day bucketing."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Union

import pytz
from dateutil.relativedelta import relativedelta

from gasboard.core.exceptions import ValidationError

_YEAR_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

TzLike = Union[str, pytz.BaseTzInfo]


def get_local_tz(tz: TzLike) -> pytz.BaseTzInfo:
    """Resolve a timezone name (e.g. "Asia/Shanghai") to a pytz timezone."""
    if isinstance(tz, str):
        try:
            return pytz.timezone(tz)
        except pytz.UnknownTimeZoneError as exc:
            raise ValidationError(f"Unknown timezone: {tz}") from exc
    return tz


def now_utc() -> datetime:
    """Return current time in UTC."""
    return datetime.now(timezone.utc)


def local_date_for(block_time: int, tz: TzLike) -> str:
    """Local calendar date (YYYY-MM-DD) of a unix timestamp."""
    local_tz = get_local_tz(tz)
    dt = datetime.fromtimestamp(block_time, tz=timezone.utc).astimezone(local_tz)
    return dt.strftime("%Y-%m-%d")


def parse_year_month(year_month: str) -> date:
    """Parse "YYYY-MM" and return the first day of that month."""
    if not isinstance(year_month, str) or not _YEAR_MONTH_RE.match(year_month):
        raise ValidationError(f"Invalid month, expected YYYY-MM: {year_month!r}")
    year, month = year_month.split("-")
    return date(int(year), int(month), 1)


def parse_day(value: str) -> date:
    """Parse "YYYY-MM-DD"."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date, expected YYYY-MM-DD: {value!r}") from exc


def month_days(year_month: str) -> list[str]:
    """Every calendar day of the month, in order."""
    first = parse_year_month(year_month)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return [(first + timedelta(days=i)).isoformat() for i in range(last.day)]


def day_window(day: str, tz: TzLike) -> tuple[int, int]:
    """Unix seconds [start, end] covering one local calendar day."""
    local_tz = get_local_tz(tz)
    d = parse_day(day)
    start = local_tz.localize(datetime(d.year, d.month, d.day, 0, 0, 0))
    end = local_tz.localize(datetime(d.year, d.month, d.day, 23, 59, 59))
    return int(start.timestamp()), int(end.timestamp())


def month_window(year_month: str, tz: TzLike) -> tuple[int, int]:
    """Unix seconds [start, end] covering one local calendar month."""
    days = month_days(year_month)
    start, _ = day_window(days[0], tz)
    _, end = day_window(days[-1], tz)
    return start, end
