"""Engine and session management for the gas cache store."""

from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from gasboard.config.settings import get_settings

Base = declarative_base()

# Process-wide store handles; rebuilt by init_db_with_path / reset_database
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _build_engine(database_url: str) -> Engine:
    # SQLite connections are shared with FastAPI's worker threads
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args, echo=False)


def _create_tables(engine: Engine) -> None:
    # Registers GasCacheORM on Base.metadata
    from gasboard.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_engine() -> Engine:
    """Engine for the configured database URL, created on first use."""
    global _engine
    if _engine is None:
        _engine = _build_engine(get_settings().get_database_url())
    return _engine


def get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the gas_cache table on the configured database if missing."""
    _create_tables(get_engine())


def init_db_with_path(db_path: Path) -> None:
    """Point the store at a SQLite file and create its tables."""
    global _engine

    reset_database()
    _engine = _build_engine(f"sqlite:///{db_path}")
    _create_tables(_engine)


def reset_database() -> None:
    """Dispose the engine so the next access re-reads settings."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
