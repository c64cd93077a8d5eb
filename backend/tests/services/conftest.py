"""Service test fixtures — file-backed SQLite + coordinator + FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path (WAL, BEGIN IMMEDIATE)
    - Fixtures never hold an open transaction while the code under test runs
    - db_manager patched so routes resolve the coordinator against the test DB

Design Decisions:
    - File DB with NullPool over :memory:/StaticPool: each concurrent transaction
      needs its own connection so allocation tests exercise real lock contention
    - Seeding helpers commit through short-lived sessions
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import NullPool

from arena.config import Settings
from arena.db.base import Base
from arena.db.session import create_engine, create_session_factory
from arena.infrastructure.database import DatabaseSessionManager
import arena.infrastructure.database as db_module
from arena.main import app
from arena.models.competition import Competition
from arena.models.round import Round
from arena.models.sticker import PromotionSticker
from arena.services.entry_lifecycle import EntryLifecycleCoordinator

ROUND_START = datetime(2024, 1, 10, tzinfo=timezone.utc)
ROUND_END = datetime(2024, 1, 20, tzinfo=timezone.utc)


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'arena.db'}",
        busy_timeout_seconds=10,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
def test_settings():
    return Settings(
        allocation_max_attempts=10,
        allocation_base_delay_ms=5,
        allocation_max_delay_ms=100,
        visibility_sweep_enabled=False,
    )


@pytest.fixture
def coordinator(test_session_factory, test_settings):
    return EntryLifecycleCoordinator(test_session_factory, test_settings)


class Seeder:
    """Commits reference data the service only reads."""

    def __init__(self, session_factory):
        self._factory = session_factory

    async def _add(self, obj):
        async with self._factory() as db:
            async with db.begin():
                db.add(obj)
        return obj

    async def competition(self, **kwargs) -> Competition:
        kwargs.setdefault("title", "Summer Shots")
        return await self._add(Competition(**kwargs))

    async def round(
        self,
        competition: Competition,
        start_date: datetime = ROUND_START,
        end_date: datetime = ROUND_END,
        **kwargs,
    ) -> Round:
        kwargs.setdefault("name", "Round 1")
        return await self._add(Round(
            competition_id=competition.id,
            start_date=start_date,
            end_date=end_date,
            **kwargs,
        ))

    async def sticker(self, competition: Competition, **kwargs) -> PromotionSticker:
        kwargs.setdefault("title", "Gold")
        kwargs.setdefault("image_url", "https://cdn.example.test/stickers/gold.png")
        return await self._add(PromotionSticker(competition_id=competition.id, **kwargs))


@pytest.fixture
def seed(test_session_factory):
    return Seeder(test_session_factory)


@pytest.fixture
async def competition(seed):
    return await seed.competition()


@pytest.fixture
async def round_(seed, competition):
    return await seed.round(competition)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client bound to the test database."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def live_round(seed, competition):
    """A round relative to the real clock, for HTTP tests that cannot pin `now`."""
    now = datetime.now(timezone.utc)
    return await seed.round(
        competition, start_date=now + timedelta(days=1), end_date=now + timedelta(days=10),
    )
