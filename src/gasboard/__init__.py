"""Solana gas board: per-day transaction fee sync and cache."""

__version__ = "0.1.0"
