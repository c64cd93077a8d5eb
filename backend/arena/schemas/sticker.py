"""Sticker Schemas — allocation request and capacity views."""

from uuid import UUID

from pydantic import BaseModel

from arena.core.domain_types import StickerPosition


class StickerApply(BaseModel):
    sticker_id: UUID


class UsageResponse(BaseModel):
    usage_id: UUID


class StickerCapacityResponse(BaseModel):
    sticker_id: UUID
    used: int
    limit: int | None
    remaining: int | None


class AvailableSticker(BaseModel):
    id: UUID
    title: str
    image_url: str
    position: StickerPosition
    used: int
    limit: int | None
    remaining: int | None
