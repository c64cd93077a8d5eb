"""Content Routes — hooks the content service calls for stickering and deletion.

Invariants:
    - Deleting content unlinks every referencing entry exactly like a direct withdraw
    - Stickers can only be applied while the entry's round is upcoming
"""

from fastapi import APIRouter, Depends, Path, status

from arena.api.dependencies import get_coordinator, optional_user_id
from arena.schemas.entry import ContentDeleteAck
from arena.schemas.sticker import StickerApply, UsageResponse
from arena.services.entry_lifecycle import EntryLifecycleCoordinator

router = APIRouter(prefix="/api/v1/content", tags=["content"])


@router.delete("/{content_ref}", response_model=ContentDeleteAck)
async def delete_content(
    content_ref: str = Path(min_length=1, max_length=64),
    user_id: str | None = Depends(optional_user_id),
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    unlinked = await coordinator.delete_content(content_ref, user_id)
    return ContentDeleteAck(post_id=content_ref, entries_unlinked=unlinked)


@router.post(
    "/{content_ref}/sticker",
    response_model=UsageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_sticker_to_content(
    body: StickerApply,
    content_ref: str = Path(min_length=1, max_length=64),
    user_id: str | None = Depends(optional_user_id),
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    usage_id = await coordinator.apply_sticker_to_content(
        content_ref, body.sticker_id, user_id,
    )
    return UsageResponse(usage_id=usage_id)
