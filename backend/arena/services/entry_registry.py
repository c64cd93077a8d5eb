"""Entry Registry — one live entry per round and user, with clock-derived permission gates.

Invariants:
    - At most one entry per (round_id, user_id) carries a post_id; enforced by the
      submit gate and backstopped by the partial unique index
    - Submit needs the round not ENDED; edit/withdraw need it UPCOMING
    - Withdraw unlinks (post_id -> None); rows are never deleted
    - Round state is evaluated on every call from the supplied instant
    - Lookups that precede a mutation take the entry row lock (FOR UPDATE), so
      racing edits/withdrawals of one entry apply one after the other

Design Decisions:
    - Empty slots (post_id None) are reused on resubmission, oldest first, so a
      withdraw/resubmit cycle does not grow the table
    - IntegrityError on the live index is mapped to DuplicateSubmissionError:
      two racing first submissions resolve to exactly one winner
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.domain_types import FeedKind
from arena.core.enforce_entry import check_modification_allowed, check_submission_allowed
from arena.core.errors import DuplicateSubmissionError, ErrorContext, NotFoundError
from arena.core.round_clock import state_of
from arena.models.entry import Entry
from arena.models.round import Round

logger = logging.getLogger(__name__)

_LIVE_INDEX_MARKERS = ("uq_entries_live_round_user", "entries.round_id, entries.user_id")


def _is_live_index_violation(e: IntegrityError) -> bool:
    message = str(e.orig)
    return any(marker in message for marker in _LIVE_INDEX_MARKERS)


class EntryRegistry:
    """Entry persistence and gates within one transaction."""

    def __init__(self, db: AsyncSession):
        self._db = db

    # ─── Lookups ────────────────────────────────────────────────

    async def get_round(self, round_id: UUID) -> Round:
        result = await self._db.execute(select(Round).where(Round.id == round_id))
        round_ = result.scalar_one_or_none()
        if round_ is None:
            raise NotFoundError("Round", str(round_id))
        return round_

    async def get_entry(
        self, entry_id: UUID, user_id: str | None = None, lock: bool = False,
    ) -> Entry:
        """Fetch an entry; entries owned by someone else are reported as missing."""
        query = select(Entry).where(Entry.id == entry_id)
        if lock:
            query = query.with_for_update()
        result = await self._db.execute(query)
        entry = result.scalar_one_or_none()
        if entry is None or (user_id is not None and entry.user_id != user_id):
            raise NotFoundError("Entry", str(entry_id))
        return entry

    async def find_live_entry(self, round_id: UUID, user_id: str) -> Entry | None:
        result = await self._db.execute(
            select(Entry)
            .where(
                Entry.round_id == round_id,
                Entry.user_id == user_id,
                Entry.post_id.is_not(None),
            )
            .with_for_update(),
        )
        return result.scalar_one_or_none()

    async def _find_empty_slot(self, round_id: UUID, user_id: str) -> Entry | None:
        result = await self._db.execute(
            select(Entry)
            .where(
                Entry.round_id == round_id,
                Entry.user_id == user_id,
                Entry.post_id.is_(None),
            )
            .order_by(Entry.created_at)
            .limit(1)
            .with_for_update(),
        )
        return result.scalar_one_or_none()

    async def entries_for_content(self, post_id: str) -> list[Entry]:
        result = await self._db.execute(
            select(Entry)
            .where(Entry.post_id == post_id)
            .order_by(Entry.created_at)
            .with_for_update(),
        )
        return list(result.scalars().all())

    async def list_for_round(
        self, round_id: UUID, feed: FeedKind | None = None,
    ) -> list[Entry]:
        query = select(Entry).where(
            Entry.round_id == round_id, Entry.post_id.is_not(None),
        )
        if feed is FeedKind.COMPETITION:
            query = query.where(Entry.visible_in_competition_feed.is_(True))
        elif feed is FeedKind.NORMAL:
            query = query.where(Entry.visible_in_normal_feed.is_(True))
        result = await self._db.execute(query.order_by(Entry.created_at))
        return list(result.scalars().all())

    # ─── Mutations ──────────────────────────────────────────────

    async def submit(
        self,
        round_: Round,
        user_id: str,
        post_id: str,
        media_url: str,
        now: datetime | None = None,
    ) -> Entry:
        """Populate (or lazily create) the user's slot for this round."""
        live = await self.find_live_entry(round_.id, user_id)
        check_submission_allowed(
            state_of(round_, now), str(round_.id), str(live.id) if live else None,
        )

        entry = await self._find_empty_slot(round_.id, user_id)
        if entry is None:
            entry = Entry(round_id=round_.id, user_id=user_id)
            self._db.add(entry)
        entry.post_id = post_id
        entry.media_url = media_url

        try:
            await self._db.flush()
        except IntegrityError as e:
            if not _is_live_index_violation(e):
                raise
            raise DuplicateSubmissionError(
                context=ErrorContext(round_id=str(round_.id), user_id=user_id),
            )
        logger.info(
            "Entry submitted",
            extra={"entry_id": str(entry.id), "round_id": str(round_.id), "user_id": user_id},
        )
        return entry

    def edit(
        self,
        entry: Entry,
        round_: Round,
        post_id: str,
        media_url: str,
        now: datetime | None = None,
    ) -> str | None:
        """Swap the entry's content. Returns the media it previously pointed at."""
        check_modification_allowed(state_of(round_, now), str(round_.id), str(entry.id))
        if not entry.is_submitted:
            raise NotFoundError(
                "Submission", str(entry.id), ErrorContext(entry_id=str(entry.id)),
            )
        previous_media = entry.media_url
        entry.post_id = post_id
        entry.media_url = media_url
        return previous_media

    def check_withdrawable(
        self, entry: Entry, round_: Round, now: datetime | None = None,
    ) -> None:
        check_modification_allowed(state_of(round_, now), str(round_.id), str(entry.id))

    def unlink(self, entry: Entry) -> str | None:
        """Clear the content reference. Returns the media it pointed at, if any."""
        previous_media = entry.media_url
        entry.post_id = None
        entry.media_url = None
        return previous_media
