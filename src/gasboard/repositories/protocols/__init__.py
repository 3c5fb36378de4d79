"""Repository protocol definitions (interfaces)."""

from gasboard.repositories.protocols.day_cache_repo import DayCacheRepository

__all__ = [
    "DayCacheRepository",
]
