"""Entry Lifecycle Coordinator — atomic submit/edit/delete across entries, stickers and feeds.

Invariants:
    - Every operation is ONE transaction: entry row, sticker ledger and visibility
      flags commit together or not at all
    - An entry never has a post_id without its sticker accounting, and never shows
      in the competition feed without a post_id
    - delete_entry and delete_content converge on the same end state through
      _withdraw(): post_id -> None, flags -> False, media usages reclaimed
    - Round state is evaluated inside the transaction at the moment of decision
    - Edit/delete/cascade lock the entry rows they change; on PostgreSQL the
      transaction itself is SERIALIZABLE (db/session.py)

Design Decisions:
    - Components receive the transaction's session; only the coordinator commits
      (ADR: impureim sandwich — gates are pure, the shell sequences IO around them)
    - Lock/serialization conflicts retried as a whole unit by run_in_transaction;
      domain errors are never retried
    - `now` is an optional argument on every operation: production passes nothing,
      tests pin the instant
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arena.config import Settings, get_settings
from arena.core.domain_types import (
    CompetitionMediaType, FeedKind, MediaKind, RoundState, UsageId,
)
from arena.core.enforce_entry import check_media_allowed, check_modification_allowed
from arena.core.errors import ErrorContext, NotFoundError
from arena.core.round_clock import state_of
from arena.core.sticker_ledger import StickerCapacity
from arena.infrastructure.database import run_in_transaction
from arena.models.entry import Entry
from arena.models.round import Round
from arena.models.sticker import PromotionSticker
from arena.services.entry_registry import EntryRegistry
from arena.services.feed_projector import FeedVisibilityProjector, SweepResult
from arena.services.sticker_allocator import StickerAllocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentSubmission:
    """Reference to externally stored content plus the facts needed to vet it."""
    post_id: str
    media_url: str
    media_kind: MediaKind = MediaKind.IMAGE
    duration_seconds: float | None = None


class _Unit:
    """Components bound to one transaction's session."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.registry = EntryRegistry(db)
        self.allocator = StickerAllocator(db)
        self.projector = FeedVisibilityProjector(db)


def _check_media(round_: Round, content: ContentSubmission) -> None:
    competition = round_.competition
    check_media_allowed(
        CompetitionMediaType(competition.media_type),
        content.media_kind,
        content.duration_seconds,
        competition.max_duration_seconds,
    )


class EntryLifecycleCoordinator:
    """Synchronous request/response operations of the entry lifecycle."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ):
        self._session_factory = session_factory
        self._settings = settings or get_settings()

    async def _run(self, operation: str, work):
        async def _in_unit(db: AsyncSession):
            return await work(_Unit(db))

        return await run_in_transaction(
            self._session_factory,
            _in_unit,
            max_attempts=self._settings.allocation_max_attempts,
            base_delay_ms=self._settings.allocation_base_delay_ms,
            max_delay_ms=self._settings.allocation_max_delay_ms,
            operation=operation,
        )

    # ─── Mutations ──────────────────────────────────────────────

    async def submit_entry(
        self,
        competition_id: UUID,
        round_id: UUID,
        user_id: str,
        content: ContentSubmission,
        sticker_id: UUID | None = None,
        now: datetime | None = None,
    ) -> Entry:
        """First submission for (round, user); optionally stickers the media."""

        async def work(unit: _Unit) -> Entry:
            round_ = await unit.registry.get_round(round_id)
            if round_.competition_id != competition_id or not round_.competition.is_active:
                raise NotFoundError(
                    "Round", str(round_id), ErrorContext(round_id=str(round_id)),
                )
            _check_media(round_, content)
            entry = await unit.registry.submit(
                round_, user_id, content.post_id, content.media_url, now,
            )
            if sticker_id is not None:
                await unit.allocator.apply_sticker(
                    sticker_id, content.media_url, competition_id=round_.competition_id,
                )
            unit.projector.refresh(entry, round_, now)
            await unit.db.flush()
            return entry

        return await self._run("submit_entry", work)

    async def edit_entry(
        self,
        entry_id: UUID,
        content: ContentSubmission,
        sticker_id: UUID | None = None,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> Entry:
        """Swap content before the round starts; old media's sticker is released."""

        async def work(unit: _Unit) -> Entry:
            entry = await unit.registry.get_entry(entry_id, user_id, lock=True)
            round_ = await unit.registry.get_round(entry.round_id)
            _check_media(round_, content)
            previous_media = unit.registry.edit(
                entry, round_, content.post_id, content.media_url, now,
            )
            if previous_media:
                await unit.allocator.reclaim_media(previous_media)
            if sticker_id is not None:
                await unit.allocator.apply_sticker(
                    sticker_id, content.media_url, competition_id=round_.competition_id,
                )
            unit.projector.refresh(entry, round_, now)
            await unit.db.flush()
            logger.info(
                "Entry edited",
                extra={"entry_id": str(entry.id), "round_id": str(round_.id)},
            )
            return entry

        return await self._run("edit_entry", work)

    async def delete_entry(
        self,
        entry_id: UUID,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> Entry:
        """Withdraw an entry before its round starts. Repeat calls are no-ops."""

        async def work(unit: _Unit) -> Entry:
            entry = await unit.registry.get_entry(entry_id, user_id, lock=True)
            round_ = await unit.registry.get_round(entry.round_id)
            unit.registry.check_withdrawable(entry, round_, now)
            await self._withdraw(unit, entry)
            return entry

        return await self._run("delete_entry", work)

    async def delete_content(
        self,
        post_id: str,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> int:
        """Cascade a content deletion into every entry that references it."""

        async def work(unit: _Unit) -> int:
            entries = await unit.registry.entries_for_content(post_id)
            if user_id is not None:
                entries = [e for e in entries if e.user_id == user_id]
            rounds: dict[UUID, Round] = {}
            for entry in entries:
                if entry.round_id not in rounds:
                    rounds[entry.round_id] = await unit.registry.get_round(entry.round_id)
                unit.registry.check_withdrawable(entry, rounds[entry.round_id], now)
            for entry in entries:
                await self._withdraw(unit, entry)
            return len(entries)

        return await self._run("delete_content", work)

    async def _withdraw(self, unit: _Unit, entry: Entry) -> None:
        previous_media = unit.registry.unlink(entry)
        if previous_media:
            await unit.allocator.reclaim_media(previous_media)
        unit.projector.hide(entry)
        await unit.db.flush()
        logger.info(
            "Entry withdrawn",
            extra={"entry_id": str(entry.id), "round_id": str(entry.round_id)},
        )

    async def apply_sticker_to_content(
        self,
        post_id: str,
        sticker_id: UUID,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> UsageId:
        """Sticker an already-submitted entry's media while its round is upcoming."""

        async def work(unit: _Unit) -> UsageId:
            entries = [
                e for e in await unit.registry.entries_for_content(post_id)
                if user_id is None or e.user_id == user_id
            ]
            if not entries:
                raise NotFoundError("Content", post_id)
            entry = entries[0]
            round_ = await unit.registry.get_round(entry.round_id)
            check_modification_allowed(state_of(round_, now), str(round_.id), str(entry.id))
            return await unit.allocator.apply_sticker(
                sticker_id, entry.media_url, competition_id=round_.competition_id,
            )

        return await self._run("apply_sticker", work)

    async def run_visibility_sweep(self, now: datetime | None = None) -> SweepResult:
        async def work(unit: _Unit) -> SweepResult:
            return await unit.projector.sweep(now)

        return await self._run("visibility_sweep", work)

    # ─── Reads ──────────────────────────────────────────────────

    async def get_round_state(
        self, round_id: UUID, now: datetime | None = None,
    ) -> tuple[Round, RoundState]:
        async def work(unit: _Unit) -> tuple[Round, RoundState]:
            round_ = await unit.registry.get_round(round_id)
            return round_, state_of(round_, now)

        return await self._run("get_round_state", work)

    async def get_sticker_capacity(self, sticker_id: UUID) -> StickerCapacity:
        async def work(unit: _Unit) -> StickerCapacity:
            return await unit.allocator.capacity(sticker_id)

        return await self._run("get_sticker_capacity", work)

    async def list_available_stickers(
        self, competition_id: UUID,
    ) -> list[tuple[PromotionSticker, StickerCapacity]]:
        async def work(unit: _Unit):
            return await unit.allocator.available_for_competition(competition_id)

        return await self._run("list_available_stickers", work)

    async def get_entry(self, entry_id: UUID) -> Entry:
        async def work(unit: _Unit) -> Entry:
            return await unit.registry.get_entry(entry_id)

        return await self._run("get_entry", work)

    async def list_round_entries(
        self, round_id: UUID, feed: FeedKind | None = None,
    ) -> list[Entry]:
        async def work(unit: _Unit) -> list[Entry]:
            await unit.registry.get_round(round_id)
            return await unit.registry.list_for_round(round_id, feed)

        return await self._run("list_round_entries", work)
