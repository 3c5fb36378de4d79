"""Sync orchestrator: month views and single-day recompute."""

import logging
from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from enum import Enum

from gasboard.core.address import validate_address
from gasboard.core.exceptions import (
    AppError,
    PartialDataLossError,
    RateLimitedError,
    SyncFailedError,
    TransportError,
)
from gasboard.core.timezone import (
    TzLike,
    day_window,
    get_local_tz,
    month_days,
    month_window,
    parse_day,
)
from gasboard.domain.models import DayRecord, SignatureRecord
from gasboard.domain.views import DayBucket, DayView, MonthView
from gasboard.services.aggregator import Aggregator
from gasboard.services.price_oracle import PriceOracle
from gasboard.services.signature_paginator import SignaturePaginator
from gasboard.services.sync_cache import SyncCache
from gasboard.services.transaction_batcher import TransactionBatcher

logger = logging.getLogger(__name__)

TRUNCATED_MESSAGE = "Signature scan truncated; transaction count incomplete"


class SyncState(str, Enum):
    """Lifecycle of one orchestrator run."""

    IDLE = "IDLE"
    FETCHING_PRICES = "FETCHING_PRICES"
    SCANNING_SIGNATURES = "SCANNING_SIGNATURES"
    CHECKING_CACHE = "CHECKING_CACHE"
    AGGREGATING_STALE_DAYS = "AGGREGATING_STALE_DAYS"
    DONE = "DONE"
    FAILED = "FAILED"


class SyncOrchestrator:
    """
    Drives paginator -> batcher -> aggregator -> cache for one address.

    One run at a time per instance. Stale days are aggregated one after
    another, and each day is computed fully before its single cache write.
    """

    def __init__(
        self,
        paginator: SignaturePaginator,
        batcher: TransactionBatcher,
        price_oracle: PriceOracle,
        aggregator: Aggregator,
        cache: SyncCache,
        local_tz: TzLike = "Asia/Shanghai",
        max_month_transactions: int = 3000,
        scan_resume_attempts: int = 2,
    ):
        self._paginator = paginator
        self._batcher = batcher
        self._price_oracle = price_oracle
        self._aggregator = aggregator
        self._cache = cache
        self._tz = get_local_tz(local_tz)
        self._max_transactions = max_month_transactions
        self._resume_attempts = max(0, scan_resume_attempts)
        self.state = SyncState.IDLE

    def _enter(self, state: SyncState) -> None:
        logger.debug("Sync state %s -> %s", self.state.value, state.value)
        self.state = state

    async def get_month_view(
        self,
        address: str,
        year_month: str,
        recompute: bool = True,
    ) -> MonthView:
        """
        Build the MonthView for an address.

        With recompute=False the run only checks the cache against a fresh
        scan; stale days are reported as not synced and left untouched.
        """
        address = validate_address(address)
        days = month_days(year_month)
        start_ts, end_ts = month_window(year_month, self._tz)
        self.state = SyncState.IDLE

        try:
            if recompute:
                self._enter(SyncState.FETCHING_PRICES)
                await self._price_oracle.prepare(start_ts, end_ts)

            self._enter(SyncState.SCANNING_SIGNATURES)
            signatures, truncated = await self._scan(address, start_ts, end_ts)
            logger.info(
                "Scanned %d signatures for %s in %s%s",
                len(signatures),
                address,
                year_month,
                " (truncated)" if truncated else "",
            )

            self._enter(SyncState.CHECKING_CACHE)
            by_day: dict[str, list[SignatureRecord]] = defaultdict(list)
            for sig in signatures:
                by_day[sig.local_date].append(sig)
            # Days at or before the oldest scanned day may be missing signatures
            incomplete_through = min((s.local_date for s in signatures), default=days[-1]) if truncated else None

            cached = self._cache.read_range(address, days[0], days[-1])
            views: dict[str, DayView] = {}
            stale_days: list[str] = []
            for day in days:
                observed = len(by_day.get(day, []))
                if incomplete_through is not None and day <= incomplete_through:
                    views[day] = DayView(date=day, tx_count=observed, is_synced=False, error=TRUNCATED_MESSAGE)
                elif observed == 0:
                    views[day] = DayView(
                        date=day,
                        tx_count=0,
                        is_synced=True,
                        fee_native=Decimal("0"),
                        fee_usd=Decimal("0"),
                        fee_local=Decimal("0"),
                    )
                elif SyncCache.record_matches(cached.get(day), observed):
                    views[day] = self._synced_view(cached[day])
                else:
                    views[day] = DayView(date=day, tx_count=observed, is_synced=False)
                    stale_days.append(day)

            if recompute and stale_days:
                self._enter(SyncState.AGGREGATING_STALE_DAYS)
                for day in stale_days:
                    try:
                        record = await self._aggregate_day(address, day, by_day[day])
                    except AppError as exc:
                        logger.warning("Day %s for %s not synced: %s", day, address, exc)
                        views[day].error = exc.message
                        continue
                    except Exception as exc:
                        logger.exception("Day %s for %s failed", day, address)
                        views[day].error = f"Failed to sync {day}: {type(exc).__name__}"
                        continue
                    views[day] = self._synced_view(record)

            self._enter(SyncState.DONE)
            return MonthView(
                address=address,
                year_month=year_month,
                days=[views[day] for day in days],
                truncated=truncated,
                local_currency=self._price_oracle.local_currency,
            )
        except Exception:
            self._enter(SyncState.FAILED)
            raise

    async def recompute_day(self, address: str, date: str) -> DayRecord:
        """
        Recompute and cache one local day, whatever its cached state.

        Raises PartialDataLossError (nothing written) when some bodies are
        unobtainable and SyncFailedError when the scan cannot complete.
        """
        address = validate_address(address)
        parse_day(date)
        start_ts, end_ts = day_window(date, self._tz)
        self.state = SyncState.IDLE

        try:
            self._enter(SyncState.FETCHING_PRICES)
            await self._price_oracle.prepare(start_ts, end_ts)

            self._enter(SyncState.SCANNING_SIGNATURES)
            signatures, truncated = await self._scan(address, start_ts, end_ts)
            if truncated:
                raise SyncFailedError(
                    f"Signature scan for {date} exceeded {self._max_transactions} transactions"
                )

            self._enter(SyncState.CHECKING_CACHE)
            day_signatures = [s for s in signatures if s.local_date == date]

            self._enter(SyncState.AGGREGATING_STALE_DAYS)
            if day_signatures:
                record = await self._aggregate_day(address, date, day_signatures)
            else:
                record = self._cache.upsert(
                    address, date, 0, Decimal("0"), Decimal("0"), Decimal("0")
                )

            self._enter(SyncState.DONE)
            return record
        except Exception:
            self._enter(SyncState.FAILED)
            raise

    async def _scan(
        self,
        address: str,
        start_ts: int,
        end_ts: int,
    ) -> tuple[list[SignatureRecord], bool]:
        """
        Collect signatures in the window, resuming from the paginator cursor
        after a page failure. Returns (records, truncated).
        """
        records: list[SignatureRecord] = []
        seen: set[str] = set()
        cursor = None

        for attempt in range(self._resume_attempts + 1):
            remaining = self._max_transactions - len(records)
            if remaining <= 0:
                return records, True
            try:
                async for sig in self._paginator.fetch_signatures(
                    address, start_ts, end_ts, remaining, before=cursor
                ):
                    if sig.signature in seen:
                        continue
                    seen.add(sig.signature)
                    records.append(sig)
                return records, self._paginator.truncated
            except (RateLimitedError, TransportError) as exc:
                cursor = self._paginator.cursor
                if attempt >= self._resume_attempts:
                    raise SyncFailedError(f"Signature scan for {address} failed: {exc.message}") from exc
                logger.warning(
                    "Signature scan for %s interrupted (%s); resuming from %s",
                    address,
                    exc.message,
                    cursor,
                )
        # unreachable: the loop either returns or raises
        raise SyncFailedError(f"Signature scan for {address} failed")

    async def _aggregate_day(
        self,
        address: str,
        day: str,
        signatures: list[SignatureRecord],
    ) -> DayRecord:
        """Fetch, aggregate and cache one day; writes only on full data."""
        block_times = {s.signature: s.block_time for s in signatures}
        bodies = await self._batcher.fetch_bodies(list(block_times))
        if len(bodies) < len(block_times):
            raise PartialDataLossError(day, len(bodies), len(block_times))

        # Bucket by the scanned blockTime so the day matches the observed count
        bodies = [replace(b, block_time=block_times.get(b.signature, b.block_time)) for b in bodies]
        buckets = await self._aggregator.aggregate(bodies, self._price_oracle)
        bucket = buckets.get(day) or DayBucket(date=day)

        rate = await self._price_oracle.usd_to_local()
        return self._cache.upsert(
            address,
            day,
            tx_count=len(block_times),
            fee_native=bucket.fee_native,
            fee_usd=bucket.fee_usd,
            fee_local=bucket.fee_usd * rate.rate,
            price_estimated=bucket.price_estimated or rate.is_estimate,
        )

    @staticmethod
    def _synced_view(record: DayRecord) -> DayView:
        return DayView(
            date=record.date,
            tx_count=record.tx_count,
            is_synced=True,
            fee_native=record.fee_native,
            fee_usd=record.fee_usd,
            fee_local=record.fee_local,
            price_estimated=record.price_estimated,
        )
