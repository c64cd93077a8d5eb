"""Competition ORM — read-only container for rounds and promotion stickers.

Invariants:
    - Created and administered outside this service
    - media_type is a CompetitionMediaType value

Design Decisions:
    - media rules stored here because every round of a competition shares them
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arena.core.domain_types import CompetitionMediaType
from arena.db.base import Base


class Competition(Base):
    __tablename__ = "competitions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    media_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CompetitionMediaType.BOTH.value,
    )
    max_duration_seconds: Mapped[int | None] = mapped_column(
        Integer, nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
