"""Sticker Routes — capacity of one sticker and availability per competition."""

from uuid import UUID

from fastapi import APIRouter, Depends

from arena.api.dependencies import get_coordinator
from arena.core.domain_types import StickerPosition
from arena.schemas.sticker import AvailableSticker, StickerCapacityResponse
from arena.services.entry_lifecycle import EntryLifecycleCoordinator

router = APIRouter(prefix="/api/v1", tags=["stickers"])


@router.get("/stickers/{sticker_id}/capacity", response_model=StickerCapacityResponse)
async def get_sticker_capacity(
    sticker_id: UUID,
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    cap = await coordinator.get_sticker_capacity(sticker_id)
    return StickerCapacityResponse(
        sticker_id=sticker_id, used=cap.used, limit=cap.limit, remaining=cap.remaining,
    )


@router.get(
    "/competitions/{competition_id}/stickers/available",
    response_model=list[AvailableSticker],
)
async def list_available_stickers(
    competition_id: UUID,
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    available = await coordinator.list_available_stickers(competition_id)
    return [
        AvailableSticker(
            id=sticker.id,
            title=sticker.title,
            image_url=sticker.image_url,
            position=StickerPosition(sticker.position),
            used=cap.used,
            limit=cap.limit,
            remaining=cap.remaining,
        )
        for sticker, cap in available
    ]
