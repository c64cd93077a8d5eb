"""Sticker Allocator — grants and reclaims promotion-sticker usages under a hard ceiling.

Invariants:
    - Live usages of a sticker never exceed its usage_limit, under any interleaving
    - apply_sticker takes the per-sticker write lock BEFORE counting, and the count,
      the check and the insert all happen in the caller's transaction
    - reclaim is idempotent: a second call finds no live row and changes nothing
    - One live sticker per media: re-applying the same sticker returns the existing
      usage; applying a different one reclaims the previous usage first

Design Decisions:
    - Lock by write (bump allocation_version): row lock on PostgreSQL, RESERVED lock
      on SQLite; works without dialect-specific FOR UPDATE support
    - Never commits: the coordinator owns transaction boundaries
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.domain_types import UsageId
from arena.core.errors import ErrorContext, NotFoundError, ResourceExhaustedError
from arena.core.sticker_ledger import StickerCapacity, has_capacity
from arena.models.sticker import PromotionSticker, StickerUsage

logger = logging.getLogger(__name__)


class StickerAllocator:
    """Ledger operations for promotion stickers within one transaction."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_sticker(self, sticker_id: UUID) -> PromotionSticker:
        result = await self._db.execute(
            select(PromotionSticker).where(PromotionSticker.id == sticker_id),
        )
        sticker = result.scalar_one_or_none()
        if sticker is None:
            raise NotFoundError("Sticker", str(sticker_id))
        return sticker

    async def _lock_sticker(self, sticker_id: UUID) -> PromotionSticker:
        """Serialize allocators of this sticker until the transaction ends."""
        result = await self._db.execute(
            update(PromotionSticker)
            .where(PromotionSticker.id == sticker_id)
            .values(allocation_version=PromotionSticker.allocation_version + 1)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise NotFoundError("Sticker", str(sticker_id))
        locked = await self._db.execute(
            select(PromotionSticker)
            .where(PromotionSticker.id == sticker_id)
            .execution_options(populate_existing=True),
        )
        return locked.scalar_one()

    async def count_active(self, sticker_id: UUID) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(StickerUsage)
            .where(
                StickerUsage.sticker_id == sticker_id,
                StickerUsage.is_deleted.is_(False),
            ),
        )
        return int(result.scalar_one())

    async def _live_usages_for_media(self, media_url: str) -> list[StickerUsage]:
        result = await self._db.execute(
            select(StickerUsage).where(
                StickerUsage.media_url == media_url,
                StickerUsage.is_deleted.is_(False),
            ),
        )
        return list(result.scalars().all())

    async def apply_sticker(
        self,
        sticker_id: UUID,
        media_url: str,
        competition_id: UUID | None = None,
    ) -> UsageId:
        """Allocate one usage of `sticker_id` to `media_url` or raise ResourceExhaustedError."""
        sticker = await self._lock_sticker(sticker_id)
        if not sticker.is_active or (
            competition_id is not None and sticker.competition_id != competition_id
        ):
            raise NotFoundError(
                "Sticker", str(sticker_id),
                ErrorContext(sticker_id=str(sticker_id)),
            )

        for usage in await self._live_usages_for_media(media_url):
            if usage.sticker_id == sticker_id:
                return UsageId(usage.id)
            await self.reclaim(usage.sticker_id, media_url)

        used = await self.count_active(sticker_id)
        if not has_capacity(used, sticker.usage_limit):
            logger.info(
                f"Sticker {sticker_id} exhausted ({used}/{sticker.usage_limit})",
                extra={"sticker_id": str(sticker_id)},
            )
            raise ResourceExhaustedError(str(sticker_id), sticker.usage_limit or 0)

        usage = StickerUsage(sticker_id=sticker_id, media_url=media_url)
        self._db.add(usage)
        await self._db.flush()
        logger.info(
            f"Sticker applied ({used + 1}/{sticker.usage_limit or 'unlimited'})",
            extra={"sticker_id": str(sticker_id), "usage_id": str(usage.id)},
        )
        return UsageId(usage.id)

    async def reclaim(self, sticker_id: UUID, media_url: str) -> int:
        """Soft-delete live usages of one sticker on one media. No-op when none are live."""
        result = await self._db.execute(
            update(StickerUsage)
            .where(
                StickerUsage.sticker_id == sticker_id,
                StickerUsage.media_url == media_url,
                StickerUsage.is_deleted.is_(False),
            )
            .values(is_deleted=True, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False),
        )
        if result.rowcount:
            logger.info(
                f"Reclaimed {result.rowcount} sticker usage(s)",
                extra={"sticker_id": str(sticker_id)},
            )
        return result.rowcount

    async def reclaim_media(self, media_url: str) -> int:
        """Reclaim every live usage tied to a media asset, whatever the sticker."""
        result = await self._db.execute(
            update(StickerUsage)
            .where(
                StickerUsage.media_url == media_url,
                StickerUsage.is_deleted.is_(False),
            )
            .values(is_deleted=True, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False),
        )
        if result.rowcount:
            logger.info(f"Reclaimed {result.rowcount} sticker usage(s) for withdrawn media")
        return result.rowcount

    async def capacity(self, sticker_id: UUID) -> StickerCapacity:
        sticker = await self.get_sticker(sticker_id)
        used = await self.count_active(sticker_id)
        return StickerCapacity(used=used, limit=sticker.usage_limit)

    async def available_for_competition(
        self, competition_id: UUID,
    ) -> list[tuple[PromotionSticker, StickerCapacity]]:
        """Active stickers of a competition that still have room, oldest first."""
        result = await self._db.execute(
            select(PromotionSticker)
            .where(
                PromotionSticker.competition_id == competition_id,
                PromotionSticker.is_active.is_(True),
            )
            .order_by(PromotionSticker.created_at),
        )
        stickers = list(result.scalars().all())
        if not stickers:
            return []

        counts = await self._db.execute(
            select(StickerUsage.sticker_id, func.count())
            .where(
                StickerUsage.sticker_id.in_([s.id for s in stickers]),
                StickerUsage.is_deleted.is_(False),
            )
            .group_by(StickerUsage.sticker_id),
        )
        used_by_id = {sticker_id: int(n) for sticker_id, n in counts.all()}

        available = []
        for sticker in stickers:
            cap = StickerCapacity(
                used=used_by_id.get(sticker.id, 0), limit=sticker.usage_limit,
            )
            if not cap.exhausted:
                available.append((sticker, cap))
        return available
