"""
Pytest configuration and fixtures for gas board tests.

This module provides:
- In-memory SQLite database fixtures
- Deterministic fake ledger and price feed providers
- Time helpers for the Asia/Shanghai local day
- Service and repository fixtures with zero-delay retry policies
- FastAPI test client with dependency overrides
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest
import pytz
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from gasboard.main import app
from gasboard.api.deps import get_app_settings, get_ledger, get_price_feed
from gasboard.config.settings import Settings, reset_settings, set_settings
from gasboard.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from gasboard.repositories.sqlalchemy import orm_models  # noqa: F401
from gasboard.repositories.sqlalchemy import SqlAlchemyDayCacheRepository
from gasboard.core.exceptions import PriceUnavailableError, RateLimitedError, TransportError
from gasboard.core.retry import RetryPolicy
from gasboard.domain.models import PriceCandle, TransactionRecord
from gasboard.providers.schemas import SignatureInfo
from gasboard.services import (
    Aggregator,
    PriceOracle,
    SignaturePaginator,
    SyncCache,
    SyncOrchestrator,
    TransactionBatcher,
)

LOCAL_TZ = pytz.timezone("Asia/Shanghai")

# Valid base58, 44 chars
ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
OTHER_ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def local_ts(
    year: int,
    month: int,
    day: int,
    hour: int = 12,
    minute: int = 0,
    second: int = 0,
) -> int:
    """Unix seconds of a wall-clock time in Asia/Shanghai."""
    return int(LOCAL_TZ.localize(datetime(year, month, day, hour, minute, second)).timestamp())


def hourly_candles(start_ts: int, hours: int, price: Decimal) -> list[PriceCandle]:
    """Flat-priced 1h candles starting at start_ts."""
    return [
        PriceCandle(
            open_time_ms=(start_ts + h * 3600) * 1000,
            close_time_ms=(start_ts + (h + 1) * 3600) * 1000 - 1,
            open=price,
            close=price,
        )
        for h in range(hours)
    ]


def zero_delay_policy(name: str = "test", max_attempts: int = 3) -> RetryPolicy:
    return RetryPolicy(
        name=name,
        max_attempts=max_attempts,
        delay_seconds=0,
        rate_limit_delay_seconds=0,
        timeout_seconds=None,
    )


# =============================================================================
# FAKE PROVIDERS
# =============================================================================


class FakeLedger:
    """
    In-memory ledger.

    Signatures are served newest first; `before` resumes after the given
    signature. Failures can be scripted per call.
    """

    def __init__(self):
        self._transactions: dict[str, TransactionRecord] = {}
        self.signature_calls: list[tuple[str, int, Optional[str]]] = []
        self.transaction_calls: list[str] = []
        # Raise on the n-th getSignaturesForAddress call (1-based)
        self.signature_failures: dict[int, Exception] = {}
        self.missing_bodies: set[str] = set()
        self.failing_bodies: set[str] = set()

    def add(
        self,
        signature: str,
        block_time: Optional[int],
        fee_lamports: int = 5000,
    ) -> None:
        self._transactions[signature] = TransactionRecord(
            signature=signature,
            block_time=block_time,
            fee_lamports=fee_lamports,
        )

    def add_many(self, prefix: str, count: int, block_time: int, fee_lamports: int = 5000) -> None:
        for i in range(count):
            self.add(f"{prefix}-{i}", block_time + i, fee_lamports)

    def _ordered(self) -> list[TransactionRecord]:
        return sorted(
            self._transactions.values(),
            key=lambda t: (t.block_time if t.block_time is not None else 0, t.signature),
            reverse=True,
        )

    async def get_signatures_for_address(
        self,
        address: str,
        limit: int = 1000,
        before: Optional[str] = None,
    ) -> list[SignatureInfo]:
        self.signature_calls.append((address, limit, before))
        failure = self.signature_failures.pop(len(self.signature_calls), None)
        if failure is not None:
            raise failure

        ordered = self._ordered()
        start = 0
        if before is not None:
            start = next(i for i, t in enumerate(ordered) if t.signature == before) + 1
        return [
            SignatureInfo(signature=t.signature, block_time=t.block_time)
            for t in ordered[start:start + limit]
        ]

    async def get_transaction(self, signature: str) -> Optional[TransactionRecord]:
        self.transaction_calls.append(signature)
        if signature in self.failing_bodies:
            raise TransportError(f"getTransaction failed for {signature}")
        if signature in self.missing_bodies:
            return None
        return self._transactions.get(signature)


class FakePriceFeed:
    """Price feed with fixed answers; None means the source is down."""

    def __init__(
        self,
        candles: Optional[list[PriceCandle]] = None,
        historical: Optional[dict[date, Decimal]] = None,
        spot: Optional[Decimal] = None,
        usd_rate: Optional[Decimal] = Decimal("7.2"),
    ):
        self.candles = candles
        self.historical = historical or {}
        self.spot = spot
        self.usd_rate = usd_rate
        self.candle_calls: list[tuple[int, int]] = []
        self.historical_calls: list[date] = []
        self.spot_calls = 0
        self.rate_calls = 0

    async def get_candles(self, start_ms: int, end_ms: int) -> list[PriceCandle]:
        self.candle_calls.append((start_ms, end_ms))
        if self.candles is None:
            raise TransportError("klines unavailable")
        return [c for c in self.candles if c.close_time_ms >= start_ms and c.open_time_ms <= end_ms]

    async def get_historical_price(self, day: date) -> Decimal:
        self.historical_calls.append(day)
        if day not in self.historical:
            raise PriceUnavailableError(f"No historical price on {day}")
        return self.historical[day]

    async def get_spot_price(self) -> Decimal:
        self.spot_calls += 1
        if self.spot is None:
            raise PriceUnavailableError("No spot price")
        return self.spot

    async def get_usd_rate(self, currency: str) -> Decimal:
        self.rate_calls += 1
        if self.usd_rate is None:
            raise RateLimitedError("exchange rates rate limited")
        return self.usd_rate


@pytest.fixture
def ledger() -> FakeLedger:
    """Provide an empty fake ledger."""
    return FakeLedger()


@pytest.fixture
def price_feed() -> FakePriceFeed:
    """Provide a price feed with a flat $100 series over March 2024."""
    start = local_ts(2024, 3, 1, 0)
    return FakePriceFeed(candles=hourly_candles(start, 31 * 24, Decimal("100")))


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def day_cache_repo(test_session) -> SqlAlchemyDayCacheRepository:
    """Provide test DayCacheRepository."""
    return SqlAlchemyDayCacheRepository(test_session)


@pytest.fixture
def sync_cache(day_cache_repo) -> SyncCache:
    """Provide test SyncCache."""
    return SyncCache(day_cache_repo)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def price_oracle(price_feed) -> PriceOracle:
    """Provide PriceOracle over the fake feed."""
    return PriceOracle(
        price_feed,
        default_price=Decimal("85"),
        default_usd_to_local=Decimal("7.25"),
        local_currency="CNY",
        policy=zero_delay_policy("price_lookup", max_attempts=2),
    )


@pytest.fixture
def paginator(ledger) -> SignaturePaginator:
    """Provide SignaturePaginator with small pages and no pacing."""
    return SignaturePaginator(
        ledger,
        local_tz="Asia/Shanghai",
        policy=zero_delay_policy("scan_page"),
        page_limit=10,
        page_delay_seconds=0,
    )


@pytest.fixture
def batcher(ledger) -> TransactionBatcher:
    """Provide TransactionBatcher with no pacing."""
    return TransactionBatcher(
        ledger,
        policy=zero_delay_policy("batch_item"),
        batch_size=5,
        batch_delay_seconds=0,
    )


@pytest.fixture
def aggregator() -> Aggregator:
    return Aggregator("Asia/Shanghai")


@pytest.fixture
def orchestrator(paginator, batcher, price_oracle, aggregator, sync_cache) -> SyncOrchestrator:
    """Provide a fully wired SyncOrchestrator."""
    return SyncOrchestrator(
        paginator=paginator,
        batcher=batcher,
        price_oracle=price_oracle,
        aggregator=aggregator,
        cache=sync_cache,
        local_tz="Asia/Shanghai",
        max_month_transactions=3000,
        scan_resume_attempts=2,
    )


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


def _test_settings() -> Settings:
    return Settings(
        database_url="sqlite:///:memory:",
        signatures_page_limit=10,
        page_delay_seconds=0,
        batch_delay_seconds=0,
        rpc_retry_delay_seconds=0,
        rpc_rate_limit_delay_seconds=0,
        price_retry_delay_seconds=0,
    )


@pytest.fixture
def client(test_engine, ledger, price_feed) -> TestClient:
    """Provide FastAPI test client with test database and fake upstreams."""
    settings = _test_settings()
    set_settings(settings)
    reset_database()
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_price_feed] = lambda: price_feed
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()
    reset_settings()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.000001"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(Decimal(actual) - Decimal(expected))
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"
