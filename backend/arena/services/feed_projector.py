"""Feed Visibility Projector — keeps the denormalized feed flags consistent with the clock.

Invariants:
    - Every mutation writes both flags from core.feed_visibility.project()
    - sweep() only flips flags false -> true for entries that have content, so it
      commutes with concurrent edits and withdrawals
    - sweep() is idempotent: a second pass over unchanged data updates nothing

Design Decisions:
    - Write-time projection + periodic sweep (strategy a). Staleness bound for the
      normal feed = sweep interval after the round's start_date
    - Round state evaluated in Python via RoundClock, then applied as guarded bulk
      UPDATEs (post_id IS NOT NULL AND flag IS false) so a concurrent withdraw wins
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.feed_visibility import HIDDEN, VisibilityFlags, project
from arena.core.round_clock import has_started, state_of
from arena.models.entry import Entry
from arena.models.round import Round

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    normal_feed_revealed: int
    competition_feed_repaired: int

    @property
    def updated(self) -> int:
        return self.normal_feed_revealed + self.competition_feed_repaired


def _write_flags(entry: Entry, flags: VisibilityFlags) -> None:
    entry.visible_in_competition_feed = flags.competition_feed
    entry.visible_in_normal_feed = flags.normal_feed


class FeedVisibilityProjector:
    def __init__(self, db: AsyncSession):
        self._db = db

    def refresh(
        self, entry: Entry, round_: Round, now: datetime | None = None,
    ) -> VisibilityFlags:
        flags = project(entry.is_submitted, state_of(round_, now))
        _write_flags(entry, flags)
        return flags

    def hide(self, entry: Entry) -> None:
        _write_flags(entry, HIDDEN)

    async def sweep(self, now: datetime | None = None) -> SweepResult:
        """Reveal live entries whose round has started since they were written."""
        pending = await self._db.execute(
            select(Round)
            .where(
                Round.id.in_(
                    select(Entry.round_id)
                    .where(
                        Entry.post_id.is_not(None),
                        Entry.visible_in_normal_feed.is_(False),
                    )
                    .distinct(),
                ),
            ),
        )
        started = [r.id for r in pending.scalars().all() if has_started(r, now)]

        revealed = 0
        if started:
            result = await self._db.execute(
                update(Entry)
                .where(
                    Entry.round_id.in_(started),
                    Entry.post_id.is_not(None),
                    Entry.visible_in_normal_feed.is_(False),
                )
                .values(visible_in_normal_feed=True)
                .execution_options(synchronize_session=False),
            )
            revealed = result.rowcount

        repaired = await self._db.execute(
            update(Entry)
            .where(
                Entry.post_id.is_not(None),
                Entry.visible_in_competition_feed.is_(False),
            )
            .values(visible_in_competition_feed=True)
            .execution_options(synchronize_session=False),
        )

        result = SweepResult(
            normal_feed_revealed=revealed,
            competition_feed_repaired=repaired.rowcount,
        )
        if result.updated:
            logger.info(
                f"Visibility sweep revealed {revealed} entr(y/ies) in normal feed, "
                f"repaired {repaired.rowcount} in competition feed",
                extra={"updated": result.updated},
            )
        return result
