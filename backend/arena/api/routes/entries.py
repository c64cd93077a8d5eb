"""Entry Routes — submit, read, edit and withdraw a round entry.

Invariants:
    - Submission identity comes from X-User-Id, never from the body
    - Edit/delete of another user's entry is reported as 404
    - Domain errors propagate to the global ArenaError handler
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from arena.api.dependencies import get_coordinator, optional_user_id, require_user_id
from arena.schemas.entry import DeleteAck, EntryEdit, EntryResponse, EntrySubmit
from arena.services.entry_lifecycle import EntryLifecycleCoordinator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["entries"])


@router.post(
    "/competitions/{competition_id}/rounds/{round_id}/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_entry(
    competition_id: UUID,
    round_id: UUID,
    body: EntrySubmit,
    user_id: str = Depends(require_user_id),
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    """Submit the caller's single entry for a round."""
    entry = await coordinator.submit_entry(
        competition_id, round_id, user_id, body.to_submission(), body.sticker_id,
    )
    return EntryResponse.model_validate(entry)


@router.get("/entries/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: UUID,
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    return EntryResponse.model_validate(await coordinator.get_entry(entry_id))


@router.put("/entries/{entry_id}", response_model=EntryResponse)
async def edit_entry(
    entry_id: UUID,
    body: EntryEdit,
    user_id: str | None = Depends(optional_user_id),
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    """Replace the entry's content. Only before the round starts."""
    entry = await coordinator.edit_entry(
        entry_id, body.to_submission(), body.sticker_id, user_id,
    )
    return EntryResponse.model_validate(entry)


@router.delete("/entries/{entry_id}", response_model=DeleteAck)
async def delete_entry(
    entry_id: UUID,
    user_id: str | None = Depends(optional_user_id),
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    """Withdraw the entry and release its sticker. Only before the round starts."""
    entry = await coordinator.delete_entry(entry_id, user_id)
    return DeleteAck(id=entry.id)
