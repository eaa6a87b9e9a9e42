"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from datetime import datetime
import logging
import random
import time
from typing import Any, Callable, Generator, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from barberbook.core.config import settings
from barberbook.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_DEFAULT_POOL_KWARGS: dict[str, Any] = {
    "pool_size": settings.db_pool_size,
    "max_overflow": settings.db_max_overflow,
    "pool_timeout": settings.db_pool_timeout,
    "pool_recycle": settings.db_pool_recycle,
    "pool_pre_ping": True,
    # LIFO: Reuse most recently used connection (more likely to be healthy)
    "pool_use_lifo": True,
}


def _build_engine_kwargs(db_url: str) -> dict[str, Any]:
    """Engine kwargs for the configured backend; SQLite gets no pool sizing."""
    if db_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    kwargs = dict(_DEFAULT_POOL_KWARGS)
    kwargs["poolclass"] = QueuePool
    connect_args: dict[str, Any] = {
        "connect_timeout": 5,
        "application_name": "barberbook_api",
    }
    if settings.db_statement_timeout_ms:
        connect_args["options"] = f"-c statement_timeout={settings.db_statement_timeout_ms}"
    kwargs["connect_args"] = connect_args
    return kwargs


db_url = settings.get_database_url()
engine: Engine = create_engine(db_url, **_build_engine_kwargs(db_url))


# Log pool events for monitoring
@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


@event.listens_for(engine, "checkout")
def receive_checkout(dbapi_connection: Any, connection_record: Any, connection_proxy: Any) -> None:
    logger.debug("Connection checked out from pool")


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
        return {}
    return {
        "size": pool.size(),
        "checked_in": pool.checkedin(),
        "checked_out": pool.checkedout(),
        "total": pool.size() + pool.overflow(),
        "overflow": pool.overflow(),
    }


T = TypeVar("T")

# serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})
_RETRYABLE_ERROR_SNIPPETS = (
    "could not serialize access",
    "deadlock detected",
    "database is locked",
)


def _iter_causes(exc: BaseException) -> Generator[BaseException, None, None]:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def is_transient_db_error(exc: BaseException) -> bool:
    """
    True when ``exc`` (or anything it wraps) is a store-level conflict that is
    safe to retry: serialization failures, deadlocks and SQLite busy locks.
    """
    for candidate in _iter_causes(exc):
        if not isinstance(candidate, DBAPIError):
            continue
        orig = getattr(candidate, "orig", None)
        pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if pgcode in _RETRYABLE_SQLSTATES:
            return True
        message = str(orig or candidate).lower()
        if any(snippet in message for snippet in _RETRYABLE_ERROR_SNIPPETS):
            return True
    return False


def _retry_delay(attempt: int, base_delay: float) -> float:
    base = base_delay * (2 ** (attempt - 1))
    return base + random.uniform(0, base_delay * attempt)


def with_db_retry(
    op_name: str,
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Execute a DB operation, retrying it when the store aborts it with a transient conflict.

    ``func`` must be a complete unit of work (it opens and commits its own
    transaction) so a retry replays it from the start. Non-transient errors and
    the last transient error are re-raised unchanged.
    """

    attempt = 1
    while True:
        try:
            return func()
        except Exception as exc:
            if attempt >= max_attempts or not is_transient_db_error(exc):
                raise

            delay = _retry_delay(attempt, base_delay)
            logger.warning(
                "Transient DB failure detected, retrying",
                extra={
                    "event": "db_retry",
                    "op": op_name,
                    "attempt": attempt,
                    "delay": delay,
                    "error": str(exc),
                },
            )
            prometheus_metrics.inc_db_retry(op_name)
            time.sleep(delay)
            attempt += 1


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "get_db_pool_status",
    "is_transient_db_error",
    "with_db_retry",
]
