"""
Integration tests for the SQLAlchemy day cache repository with SQLite.

Tests cover:
- Insert and conflict update on (address, date)
- Range and month queries
- Decimal and timezone round-trips
- Last-write-wins ordering and rollback after a failed write
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gasboard.domain.models import DayRecord
from gasboard.repositories.sqlalchemy import (
    SqlAlchemyDayCacheRepository,
    get_session_factory,
    init_db_with_path,
    reset_database,
)
from gasboard.repositories.sqlalchemy.orm_models import GasCacheORM

from tests.conftest import ADDRESS, OTHER_ADDRESS


def make_record(date: str, tx_count: int = 3, address: str = ADDRESS, **kwargs) -> DayRecord:
    defaults = dict(
        fee_native=Decimal("0.000024000"),
        fee_usd=Decimal("0.002400"),
        fee_local=Decimal("0.017"),
        updated_at=datetime(2024, 4, 1, 8, 0, 0, 123456, tzinfo=timezone.utc),
    )
    defaults.update(kwargs)
    return DayRecord(address=address, date=date, tx_count=tx_count, **defaults)


class TestDayCacheRepository:
    """Tests for SqlAlchemyDayCacheRepository."""

    def test_upsert_inserts_new_record(self, day_cache_repo: SqlAlchemyDayCacheRepository):
        """
        GIVEN an empty table
        WHEN I upsert a day
        THEN it can be read back with the same values
        """
        stored = day_cache_repo.upsert(make_record("2024-03-05"))

        fetched = day_cache_repo.get(ADDRESS, "2024-03-05")
        assert fetched == stored
        assert fetched.tx_count == 3
        assert fetched.fee_native == Decimal("0.000024")
        assert fetched.fee_usd == Decimal("0.0024")
        assert fetched.fee_local == Decimal("0.017")

    def test_updated_at_is_timezone_aware(self, day_cache_repo: SqlAlchemyDayCacheRepository):
        day_cache_repo.upsert(make_record("2024-03-05"))

        fetched = day_cache_repo.get(ADDRESS, "2024-03-05")

        assert fetched.updated_at == datetime(2024, 4, 1, 8, 0, 0, 123456, tzinfo=timezone.utc)

    def test_upsert_on_conflict_updates_single_row(
        self,
        day_cache_repo: SqlAlchemyDayCacheRepository,
        test_session: Session,
    ):
        """
        GIVEN an existing record for (address, date)
        WHEN I upsert new values for the same key
        THEN one row remains holding the new values
        """
        day_cache_repo.upsert(make_record("2024-03-05", tx_count=5))
        day_cache_repo.upsert(make_record("2024-03-05", tx_count=7, fee_usd=Decimal("0.0042"), price_estimated=True))

        rows = test_session.query(GasCacheORM).filter(GasCacheORM.address == ADDRESS).all()
        assert len(rows) == 1
        fetched = day_cache_repo.get(ADDRESS, "2024-03-05")
        assert fetched.tx_count == 7
        assert fetched.fee_usd == Decimal("0.0042")
        assert fetched.price_estimated is True

    def test_second_write_wins_with_later_updated_at(
        self,
        day_cache_repo: SqlAlchemyDayCacheRepository,
        test_session: Session,
    ):
        """
        GIVEN two writes to the same (address, date), the second one later
        WHEN I read the key back
        THEN one row holds the second write's values and its updated_at
        """
        first_at = datetime(2024, 4, 1, 8, 0, 0, tzinfo=timezone.utc)
        second_at = first_at + timedelta(seconds=5)
        first = day_cache_repo.upsert(make_record("2024-03-05", tx_count=5, updated_at=first_at))
        second = day_cache_repo.upsert(
            make_record("2024-03-05", tx_count=7, fee_local=Decimal("0.030"), updated_at=second_at)
        )

        assert test_session.query(GasCacheORM).count() == 1
        fetched = day_cache_repo.get(ADDRESS, "2024-03-05")
        assert fetched == second
        assert fetched.tx_count == 7
        assert fetched.fee_local == Decimal("0.030")
        assert fetched.updated_at == second_at
        assert fetched.updated_at > first.updated_at

    def test_native_fee_may_be_unknown(self, day_cache_repo: SqlAlchemyDayCacheRepository):
        day_cache_repo.upsert(make_record("2024-03-05", fee_native=None))

        assert day_cache_repo.get(ADDRESS, "2024-03-05").fee_native is None

    def test_failed_write_is_rolled_back(
        self,
        day_cache_repo: SqlAlchemyDayCacheRepository,
        test_session: Session,
    ):
        """
        GIVEN a write rejected by the database
        WHEN the next write runs on the same session
        THEN the session was rolled back and the next write succeeds
        """
        with pytest.raises(IntegrityError):
            day_cache_repo.upsert(make_record("2024-03-05", tx_count=None))

        assert test_session.in_transaction() is False
        day_cache_repo.upsert(make_record("2024-03-06"))
        assert day_cache_repo.get(ADDRESS, "2024-03-05") is None
        assert day_cache_repo.get(ADDRESS, "2024-03-06").tx_count == 3

    def test_get_missing_returns_none(self, day_cache_repo: SqlAlchemyDayCacheRepository):
        assert day_cache_repo.get(ADDRESS, "2024-03-05") is None

    def test_get_range_is_ordered_and_scoped(self, day_cache_repo: SqlAlchemyDayCacheRepository):
        """
        GIVEN records for two addresses across a month boundary
        WHEN I query a March range for one address
        THEN only that address's March records come back, oldest first
        """
        for day in ("2024-03-20", "2024-02-29", "2024-03-01", "2024-04-01"):
            day_cache_repo.upsert(make_record(day))
        day_cache_repo.upsert(make_record("2024-03-10", address=OTHER_ADDRESS))

        records = day_cache_repo.get_range(ADDRESS, "2024-03-01", "2024-03-31")

        assert [r.date for r in records] == ["2024-03-01", "2024-03-20"]

    def test_get_month(self, day_cache_repo: SqlAlchemyDayCacheRepository):
        day_cache_repo.upsert(make_record("2024-03-31"))
        day_cache_repo.upsert(make_record("2024-03-01"))
        day_cache_repo.upsert(make_record("2024-10-01"))

        records = day_cache_repo.get_month(ADDRESS, "2024-03")

        assert [r.date for r in records] == ["2024-03-01", "2024-03-31"]


class TestDatabaseSetup:
    """Tests for file-backed database initialization."""

    def test_init_db_with_path_creates_usable_store(self, tmp_path):
        """
        GIVEN a fresh SQLite file path
        WHEN I initialize the store there
        THEN the gas_cache table exists and accepts writes
        """
        db_path = tmp_path / "gas_cache.db"
        init_db_with_path(db_path)
        try:
            session = get_session_factory()()
            try:
                repo = SqlAlchemyDayCacheRepository(session)
                repo.upsert(make_record("2024-03-05"))
                assert repo.get(ADDRESS, "2024-03-05").tx_count == 3
            finally:
                session.close()
            assert db_path.exists()
        finally:
            reset_database()
