"""Dependency injection for FastAPI."""

import httpx
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from gasboard.config.settings import Settings, get_settings
from gasboard.providers import HttpPriceFeed, LedgerProvider, PriceFeedProvider, SolanaRpcClient
from gasboard.repositories.sqlalchemy import SqlAlchemyDayCacheRepository
from gasboard.repositories.sqlalchemy.database import get_db
from gasboard.services import (
    Aggregator,
    PriceOracle,
    SignaturePaginator,
    SyncCache,
    SyncOrchestrator,
    TransactionBatcher,
)


def get_app_settings() -> Settings:
    """Provide the current Settings."""
    return get_settings()


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Provide the shared httpx client opened in the app lifespan."""
    return request.app.state.http_client


def get_day_cache_repo(db: Session = Depends(get_db)) -> SqlAlchemyDayCacheRepository:
    """Provide DayCacheRepository instance."""
    return SqlAlchemyDayCacheRepository(db)


def get_sync_cache(
    repo: SqlAlchemyDayCacheRepository = Depends(get_day_cache_repo),
) -> SyncCache:
    """Provide SyncCache instance."""
    return SyncCache(repo)


def get_ledger(
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
) -> LedgerProvider:
    """Provide the Solana RPC client."""
    return SolanaRpcClient(http, settings.rpc_url)


def get_price_feed(
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
) -> PriceFeedProvider:
    """Provide the HTTP price feed."""
    return HttpPriceFeed(
        http,
        kline_url=settings.kline_url,
        kline_symbol=settings.kline_symbol,
        kline_interval=settings.kline_interval,
        coingecko_url=settings.coingecko_url,
        coin_id=settings.coingecko_coin_id,
        exchange_rate_url=settings.exchange_rate_url,
    )


def get_price_oracle(
    feed: PriceFeedProvider = Depends(get_price_feed),
    settings: Settings = Depends(get_app_settings),
) -> PriceOracle:
    """Provide PriceOracle instance."""
    return PriceOracle(
        feed,
        default_price=settings.default_native_usd_price,
        default_usd_to_local=settings.default_usd_to_local,
        local_currency=settings.local_currency,
        policy=settings.retry_policy("price_lookup"),
    )


def get_orchestrator(
    ledger: LedgerProvider = Depends(get_ledger),
    price_oracle: PriceOracle = Depends(get_price_oracle),
    cache: SyncCache = Depends(get_sync_cache),
    settings: Settings = Depends(get_app_settings),
) -> SyncOrchestrator:
    """Provide SyncOrchestrator wired from settings."""
    paginator = SignaturePaginator(
        ledger,
        local_tz=settings.local_timezone,
        policy=settings.retry_policy("scan_page"),
        page_limit=settings.signatures_page_limit,
        page_delay_seconds=settings.page_delay_seconds,
        max_pages=settings.max_signature_pages,
    )
    batcher = TransactionBatcher(
        ledger,
        policy=settings.retry_policy("batch_item"),
        batch_size=settings.tx_batch_size,
        batch_delay_seconds=settings.batch_delay_seconds,
    )
    return SyncOrchestrator(
        paginator=paginator,
        batcher=batcher,
        price_oracle=price_oracle,
        aggregator=Aggregator(settings.local_timezone),
        cache=cache,
        local_tz=settings.local_timezone,
        max_month_transactions=settings.max_month_transactions,
        scan_resume_attempts=settings.scan_resume_attempts,
    )
