"""Visibility Sweep Scheduler — runs the feed reconciliation sweep on an interval.

Invariants:
    - At most one sweep runs at a time (max_instances=1, missed runs coalesced)
    - A failed sweep is logged and retried on the next tick; it never stops the scheduler

Design Decisions:
    - APScheduler AsyncIOScheduler: jobs share the app's event loop, started and
      stopped from the FastAPI lifespan
    - The sweep is safe at any time and any frequency, so no coordination with
      request handlers is needed
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from arena.core.errors import ArenaError
from arena.services.entry_lifecycle import EntryLifecycleCoordinator
from arena.services.feed_projector import SweepResult

logger = logging.getLogger(__name__)

JOB_ID = "visibility_sweep"


class VisibilitySweepScheduler:
    def __init__(self, coordinator: EntryLifecycleCoordinator, interval_seconds: int):
        self._coordinator = coordinator
        self._interval_seconds = interval_seconds
        self._scheduler = AsyncIOScheduler()
        self.last_result: SweepResult | None = None

    async def run_once(self) -> SweepResult | None:
        try:
            self.last_result = await self._coordinator.run_visibility_sweep()
        except ArenaError as e:
            logger.error(
                f"Visibility sweep failed: {e.message}",
                extra={"error_code": e.code},
            )
            return None
        return self.last_result

    def start(self) -> None:
        self._scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=self._interval_seconds),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"Visibility sweep scheduled every {self._interval_seconds}s")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
