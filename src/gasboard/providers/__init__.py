"""Upstream data providers: ledger RPC and price feeds."""

from gasboard.providers.ledger_provider import LedgerProvider
from gasboard.providers.price_feed_provider import PriceFeedProvider
from gasboard.providers.solana_rpc import SolanaRpcClient
from gasboard.providers.price_feed import HttpPriceFeed

__all__ = [
    "LedgerProvider",
    "PriceFeedProvider",
    "SolanaRpcClient",
    "HttpPriceFeed",
]
