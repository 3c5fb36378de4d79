"""Day cache repository protocol for persisted fee aggregates."""

from typing import Protocol, Optional

from gasboard.domain.models import DayRecord


class DayCacheRepository(Protocol):
    """Interface for per-(address, date) fee cache data access."""

    def get(self, address: str, date: str) -> Optional[DayRecord]:
        """Get the cached record for one day."""
        ...

    def get_range(self, address: str, date_start: str, date_end: str) -> list[DayRecord]:
        """Get cached records with date_start <= date <= date_end, ordered by date."""
        ...

    def get_month(self, address: str, year_month: str) -> list[DayRecord]:
        """Get cached records whose date starts with YYYY-MM."""
        ...

    def upsert(self, record: DayRecord) -> DayRecord:
        """Insert or fully replace the record for (address, date)."""
        ...
