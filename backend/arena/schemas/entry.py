"""Entry Schemas — submission/edit payloads and the entry read model.

Invariants:
    - post_id and media_url are non-empty, stripped
    - duration_seconds only meaningful for VIDEO media
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from arena.core.domain_types import MediaKind
from arena.services.entry_lifecycle import ContentSubmission


class ContentPayload(BaseModel):
    """Reference to content already stored by the media service."""
    post_id: str = Field(min_length=1, max_length=64)
    media_url: str = Field(min_length=1, max_length=2000)
    media_kind: MediaKind = MediaKind.IMAGE
    duration_seconds: float | None = Field(None, ge=0)
    sticker_id: UUID | None = None

    @field_validator("post_id", "media_url")
    @classmethod
    def strip_refs(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("reference cannot be empty or whitespace")
        return v

    def to_submission(self) -> ContentSubmission:
        return ContentSubmission(
            post_id=self.post_id,
            media_url=self.media_url,
            media_kind=self.media_kind,
            duration_seconds=self.duration_seconds,
        )


class EntrySubmit(ContentPayload):
    pass


class EntryEdit(ContentPayload):
    pass


class EntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    round_id: UUID
    user_id: str
    post_id: str | None
    media_url: str | None
    visible_in_competition_feed: bool
    visible_in_normal_feed: bool
    created_at: datetime
    updated_at: datetime


class DeleteAck(BaseModel):
    id: UUID
    deleted: bool = True


class ContentDeleteAck(BaseModel):
    post_id: str
    entries_unlinked: int
