"""SQLAlchemy implementation of DayCacheRepository."""

from datetime import timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from gasboard.domain.models import DayRecord
from gasboard.repositories.sqlalchemy.orm_models import GasCacheORM

_UPDATABLE_COLUMNS = (
    "tx_count",
    "fee_native",
    "fee_usd",
    "fee_local",
    "price_estimated",
    "updated_at",
)


class SqlAlchemyDayCacheRepository:
    """SQLAlchemy-backed per-day fee cache."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, address: str, date: str) -> Optional[DayRecord]:
        """Get the cached record for one day."""
        orm_day = (
            self._db.query(GasCacheORM)
            .filter(
                GasCacheORM.address == address,
                GasCacheORM.date_str == date,
            )
            .first()
        )
        return self._to_domain(orm_day) if orm_day else None

    def get_range(self, address: str, date_start: str, date_end: str) -> list[DayRecord]:
        """Get cached records with date_start <= date <= date_end."""
        orm_days = (
            self._db.query(GasCacheORM)
            .filter(
                GasCacheORM.address == address,
                GasCacheORM.date_str >= date_start,
                GasCacheORM.date_str <= date_end,
            )
            .order_by(GasCacheORM.date_str)
            .all()
        )
        return [self._to_domain(d) for d in orm_days]

    def get_month(self, address: str, year_month: str) -> list[DayRecord]:
        """Get cached records whose date starts with YYYY-MM."""
        orm_days = (
            self._db.query(GasCacheORM)
            .filter(
                GasCacheORM.address == address,
                GasCacheORM.date_str.startswith(f"{year_month}-"),
            )
            .order_by(GasCacheORM.date_str)
            .all()
        )
        return [self._to_domain(d) for d in orm_days]

    def upsert(self, record: DayRecord) -> DayRecord:
        """
        Insert or fully replace the record for (address, date).

        Uses a single INSERT .. ON CONFLICT DO UPDATE where the dialect
        supports it, so concurrent writers to one key are last-write-wins.
        """
        values = {
            "address": record.address,
            "date_str": record.date,
            "tx_count": record.tx_count,
            "fee_native": record.fee_native,
            "fee_usd": record.fee_usd,
            "fee_local": record.fee_local,
            "price_estimated": record.price_estimated,
            "updated_at": record.updated_at,
        }

        try:
            self._write(record, values)
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise
        # Drop identity-map copies so the re-read sees the statement's result
        self._db.expire_all()
        return self.get(record.address, record.date)

    def _write(self, record: DayRecord, values: dict) -> None:
        dialect = self._db.get_bind().dialect.name
        if dialect in ("sqlite", "postgresql"):
            insert_fn = sqlite_insert if dialect == "sqlite" else pg_insert
            stmt = insert_fn(GasCacheORM).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["address", "date_str"],
                set_={col: stmt.excluded[col] for col in _UPDATABLE_COLUMNS},
            )
            self._db.execute(stmt)
            return

        orm_day = (
            self._db.query(GasCacheORM)
            .filter(
                GasCacheORM.address == record.address,
                GasCacheORM.date_str == record.date,
            )
            .first()
        )
        if orm_day:
            for col in _UPDATABLE_COLUMNS:
                setattr(orm_day, col, values[col])
        else:
            self._db.add(GasCacheORM(**values))

    @staticmethod
    def _to_domain(orm: GasCacheORM) -> DayRecord:
        """Convert ORM row to domain model."""
        updated_at = orm.updated_at
        if updated_at is not None and updated_at.tzinfo is None:
            # SQLite drops tzinfo; values are always written in UTC
            updated_at = updated_at.replace(tzinfo=timezone.utc)
        return DayRecord(
            address=orm.address,
            date=orm.date_str,
            tx_count=orm.tx_count or 0,
            fee_native=Decimal(str(orm.fee_native)) if orm.fee_native is not None else None,
            fee_usd=Decimal(str(orm.fee_usd)) if orm.fee_usd is not None else Decimal("0"),
            fee_local=Decimal(str(orm.fee_local)) if orm.fee_local is not None else Decimal("0"),
            price_estimated=bool(orm.price_estimated),
            updated_at=updated_at,
        )
