"""Database Session Manager — async pool, strict transactions, bounded conflict retry.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - run_in_transaction commits all of a unit of work or none of it
    - Lock/serialization conflicts are retried with backoff, then surface as ConcurrencyError
    - Domain errors (ArenaError) roll back and propagate unchanged, never retried
    - All other SQLAlchemy exceptions mapped to DatabaseError (core/errors.py)

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Retry wraps the WHOLE transaction: a conflicted attempt re-reads everything
      (ADR: re-validating inside the committing transaction, never across attempts)
    - ±25% jitter on backoff: prevents lockstep retries of racing allocators
"""

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from arena.core.errors import ArenaError, ConcurrencyError, DatabaseError
from arena.db.session import create_engine, create_session_factory

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL: serialization_failure, deadlock_detected, lock_not_available
_RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03"}
_RETRYABLE_SQLITE_MESSAGES = ("database is locked", "database table is locked")


def is_retryable_conflict(exc: BaseException) -> bool:
    """True for lock/serialization failures that a fresh attempt can resolve."""
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(m in message for m in _RETRYABLE_SQLITE_MESSAGES)


def _backoff_ms(attempt: int, base_delay_ms: int, max_delay_ms: int) -> int:
    """Exponential backoff with ±25% jitter."""
    delay = min(max_delay_ms, (2 ** attempt) * base_delay_ms)
    return int(delay * random.uniform(0.75, 1.25))  # nosec B311


def _map_sqlalchemy_error(e: SQLAlchemyError) -> DatabaseError:
    if isinstance(e, IntegrityError):
        logger.error(f"DB integrity error: {e}")
        return DatabaseError("Integrity constraint violated", "commit")
    if isinstance(e, OperationalError):
        logger.error(f"DB operational error: {e}")
        return DatabaseError("Connection or operational error", "execute")
    if isinstance(e, DBAPIError):
        logger.error(f"DB driver error: {e}")
        return DatabaseError("Database driver error", "query")
    logger.error(f"SQLAlchemy error: {e}")
    return DatabaseError("Database operation failed", "unknown")


async def run_in_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    work: Callable[[AsyncSession], Awaitable[T]],
    *,
    max_attempts: int = 5,
    base_delay_ms: int = 20,
    max_delay_ms: int = 500,
    operation: str = "transaction",
) -> T:
    """Run `work` in one committed transaction, retrying whole-unit on conflict."""
    for attempt in range(max_attempts):
        try:
            async with session_factory() as db:
                async with db.begin():
                    result = await work(db)
            return result
        except ArenaError:
            raise
        except SQLAlchemyError as e:
            if not is_retryable_conflict(e):
                raise _map_sqlalchemy_error(e)
            if attempt + 1 >= max_attempts:
                logger.error(
                    f"{operation}: conflict persisted after {max_attempts} attempts",
                    extra={"attempt": attempt + 1},
                )
                raise ConcurrencyError(
                    f"{operation} could not complete due to concurrent updates; retry later",
                )
            delay = _backoff_ms(attempt, base_delay_ms, max_delay_ms)
            logger.warning(
                f"{operation}: conflict, retry after {delay}ms (attempt {attempt + 1})",
                extra={"attempt": attempt + 1},
            )
            await asyncio.sleep(delay / 1000)
    raise ConcurrencyError(f"{operation} was not attempted (max_attempts={max_attempts})")


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        busy_timeout_seconds: int = 30,
    ):
        self.engine = create_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            busy_timeout_seconds=busy_timeout_seconds,
        )
        self._session_factory = create_session_factory(self.engine)

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _map_sqlalchemy_error(e)
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager

