"""Repository layer - data access abstractions and implementations."""

from gasboard.repositories.protocols import DayCacheRepository

__all__ = [
    "DayCacheRepository",
]
