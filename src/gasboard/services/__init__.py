"""Sync services: pagination, batching, pricing, aggregation and caching."""

from gasboard.services.signature_paginator import SignaturePaginator
from gasboard.services.transaction_batcher import TransactionBatcher
from gasboard.services.price_oracle import PriceOracle
from gasboard.services.aggregator import Aggregator
from gasboard.services.sync_cache import SyncCache
from gasboard.services.sync_orchestrator import SyncOrchestrator, SyncState

__all__ = [
    "SignaturePaginator",
    "TransactionBatcher",
    "PriceOracle",
    "Aggregator",
    "SyncCache",
    "SyncOrchestrator",
    "SyncState",
]
