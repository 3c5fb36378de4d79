"""SQLAlchemy repository implementations."""

from gasboard.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from gasboard.repositories.sqlalchemy.day_cache_repo import SqlAlchemyDayCacheRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyDayCacheRepository",
]
