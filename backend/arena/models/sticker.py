"""Promotion Sticker ORM — scarce overlay assets and their usage ledger.

Invariants:
    - count(StickerUsage where sticker_id = S and not is_deleted) <= S.usage_limit
    - StickerUsage rows are never deleted; reclaim sets is_deleted = True
    - usage_limit None means unlimited
    - allocation_version is bumped by every allocation; the bump is the per-sticker
      write lock taken before counting

Design Decisions:
    - Ledger over counter: live count is recomputed, so reclaim is idempotent
      and concurrent reclaims cannot double-decrement
    - usages relationship deliberately omitted: counts are computed by query
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arena.core.domain_types import StickerPosition
from arena.db.base import Base


class PromotionSticker(Base):
    __tablename__ = "promotion_stickers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    competition_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("competitions.id"), nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    image_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    position: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StickerPosition.BOTTOM_RIGHT.value,
    )
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    allocation_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class StickerUsage(Base):
    __tablename__ = "sticker_usages"
    __table_args__ = (
        Index("ix_sticker_usages_sticker_live", "sticker_id", "is_deleted"),
        Index("ix_sticker_usages_media_url", "media_url"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    sticker_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("promotion_stickers.id"), nullable=False,
    )
    media_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
