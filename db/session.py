"""
db/session.py

Lazily-built SQLAlchemy engine and session factory for the readings table.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


@dataclass(frozen=True)
class EnginePoolSettings:
    """
    Connection pool knobs read from DB_POOL_* and SQL_ECHO.
    """

    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800
    echo: bool = False

    @classmethod
    def from_env(cls) -> EnginePoolSettings:
        return cls(
            pool_size=_env_int("DB_POOL_SIZE", cls.pool_size),
            max_overflow=_env_int("DB_MAX_OVERFLOW", cls.max_overflow),
            pool_recycle=_env_int("DB_POOL_RECYCLE", cls.pool_recycle),
            echo=os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
        )


def create_db_engine(
    database_url: str | None = None,
    *,
    pool: EnginePoolSettings | None = None,
) -> Engine:
    """
    Build a pooled PostgreSQL engine. Supabase poolers drop idle
    connections, hence ``pool_pre_ping``.
    """

    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    pool = pool or EnginePoolSettings.from_env()
    return create_engine(
        url,
        echo=pool.echo,
        pool_pre_ping=True,
        pool_size=pool.pool_size,
        max_overflow=pool.max_overflow,
        pool_recycle=pool.pool_recycle,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Readings are handed back to callers after commit.
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory
