"""Arena Entries API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ArenaError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and visibility sweep started on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The in-process sweep can be disabled (VISIBILITY_SWEEP_ENABLED=false) when an
      external cron drives POST /api/v1/cron/visibility-sweep instead
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arena.api.error_handlers import register_error_handlers
from arena.api.routes import content, cron, entries, health, rounds, stickers
from arena.config import get_settings
from arena.infrastructure.database import init_db
from arena.infrastructure.observability import setup_logging
from arena.services.entry_lifecycle import EntryLifecycleCoordinator
from arena.services.visibility_scheduler import VisibilitySweepScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        busy_timeout_seconds=settings.sqlite_busy_timeout_seconds,
    )

    scheduler = None
    if settings.visibility_sweep_enabled:
        scheduler = VisibilitySweepScheduler(
            EntryLifecycleCoordinator(manager.session_factory, settings),
            settings.visibility_sweep_interval_seconds,
        )
        scheduler.start()
    logger.info("Arena Entries API started")
    yield
    logger.info("Arena Entries API shutting down")
    if scheduler is not None:
        scheduler.shutdown()
    await manager.dispose()


app = FastAPI(
    title="Arena Entries API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(entries.router)
app.include_router(content.router)
app.include_router(rounds.router)
app.include_router(stickers.router)
app.include_router(cron.router)

register_error_handlers(app)
