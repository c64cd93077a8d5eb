"""Engine & Session Factory — builds async engines with per-dialect transaction settings.

Invariants:
    - SQLite connections run in WAL mode with a busy timeout
    - SQLite transactions start with BEGIN IMMEDIATE: writers serialize at BEGIN,
      so a count-then-insert never interleaves with another writer
    - Server databases run every transaction at SERIALIZABLE; serialization
      failures (40001) are retried whole by run_in_transaction
    - Pool sizing only applies to server databases

Design Decisions:
    - Driver-level BEGIN disabled and re-emitted from the "begin" event
      (ADR: documented SQLAlchemy recipe for pysqlite/aiosqlite transaction control)
    - Shared by DatabaseSessionManager, alembic and test fixtures
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _apply_sqlite_pragmas(dbapi_connection, busy_timeout_seconds: int) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA synchronous=NORMAL;")
    cursor.execute(f"PRAGMA busy_timeout={busy_timeout_seconds * 1000};")
    cursor.close()


def server_engine_options(pool_size: int = 20, max_overflow: int = 10) -> dict[str, Any]:
    """Engine keyword arguments for PostgreSQL (or any non-SQLite server)."""
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "execution_options": {"isolation_level": "SERIALIZABLE"},
    }


def create_engine(
    database_url: str,
    *,
    pool_size: int = 20,
    max_overflow: int = 10,
    busy_timeout_seconds: int = 30,
    **engine_kwargs: Any,
) -> AsyncEngine:
    """Create an async engine configured for strict transactions."""
    if not _is_sqlite(database_url):
        options = server_engine_options(pool_size, max_overflow)
        options.update(engine_kwargs)
        return create_async_engine(database_url, **options)

    engine = create_async_engine(
        database_url,
        connect_args={"timeout": busy_timeout_seconds},
        **engine_kwargs,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None
        _apply_sqlite_pragmas(dbapi_connection, busy_timeout_seconds)

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
