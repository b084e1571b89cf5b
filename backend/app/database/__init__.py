"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from app.core.config import settings

logger = logging.getLogger(__name__)

_DEFAULT_POOL_KWARGS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    # Fail fast when the pool is exhausted instead of blocking requests
    "pool_timeout": 5,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}


def _build_engine_kwargs(db_url: str) -> dict[str, Any]:
    """Return engine kwargs for the configured dialect."""

    if db_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in db_url:
            # One shared connection so every session sees the same in-memory schema
            kwargs["poolclass"] = StaticPool
        return kwargs

    kwargs = dict(_DEFAULT_POOL_KWARGS)
    kwargs["poolclass"] = QueuePool
    kwargs["connect_args"] = {"connect_timeout": 5, "application_name": "trade_backend"}
    return kwargs


db_url = settings.get_database_url()
engine: Engine = create_engine(db_url, future=True, **_build_engine_kwargs(db_url))


# Log pool events for monitoring
@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    if engine.dialect.name == "sqlite":
        # SQLite ignores ON DELETE clauses unless asked
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
    logger.debug("Database connection established")


@event.listens_for(engine, "checkin")
def receive_checkin(dbapi_connection: Any, connection_record: Any) -> None:
    logger.debug("Connection returned to pool")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db_pool_status() -> dict[str, int]:
    """Get current database pool statistics."""
    pool = engine.pool
    if not isinstance(pool, QueuePool):
        return {"size": 0, "checked_in": 0, "checked_out": 0, "total": 0, "overflow": 0}
    return {
        "size": pool.size(),
        "checked_in": pool.checkedin(),
        "checked_out": pool.checkedout(),
        "total": pool.size() + pool.overflow(),
        "overflow": pool.overflow(),
    }


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "get_db_pool_status",
]
