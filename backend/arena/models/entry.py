"""Entry ORM — a user's submission slot for one round.

Invariants:
    - At most one row per (round_id, user_id) with post_id IS NOT NULL
      (partial unique index uq_entries_live_round_user)
    - post_id is None  =>  both visibility flags are False
    - Rows are unlinked (post_id -> None), never deleted, while the round exists

Design Decisions:
    - post_id/media_url are opaque references into the content service; no
      back-pointer is stored on the content side
    - Visibility flags denormalized for cheap feed filters (see core.feed_visibility)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arena.db.base import Base

_LIVE = text("post_id IS NOT NULL")


class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (
        Index(
            "uq_entries_live_round_user", "round_id", "user_id",
            unique=True, postgresql_where=_LIVE, sqlite_where=_LIVE,
        ),
        Index("ix_entries_round_user", "round_id", "user_id"),
        Index("ix_entries_post_id", "post_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    round_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("rounds.id"), nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    post_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    media_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    visible_in_competition_feed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    visible_in_normal_feed: Mapped[bool] = mapped_column(
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

    @property
    def is_submitted(self) -> bool:
        return self.post_id is not None
