"""SQLAlchemy ORM model definitions."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)

from gasboard.repositories.sqlalchemy.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GasCacheORM(Base):
    """SQLAlchemy model for DayRecord (derived per-day fee aggregate)."""

    __tablename__ = "gas_cache"
    __table_args__ = (
        UniqueConstraint("address", "date_str", name="uq_gas_cache_address_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(64), nullable=False, index=True)
    date_str = Column(String(10), nullable=False)
    tx_count = Column(Integer, nullable=False, default=0)
    # NULL when a day was written without its native fee
    fee_native = Column(Numeric(precision=24, scale=9), nullable=True)
    fee_usd = Column(Numeric(precision=24, scale=6), nullable=False, default=Decimal("0"))
    fee_local = Column(Numeric(precision=24, scale=3), nullable=False, default=Decimal("0"))
    price_estimated = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
