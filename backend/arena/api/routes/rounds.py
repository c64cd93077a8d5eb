"""Round Routes — clock-derived state and feed-filtered entry listings."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from arena.api.dependencies import get_coordinator
from arena.core.domain_types import FeedKind
from arena.schemas.entry import EntryResponse
from arena.schemas.round import RoundStateResponse
from arena.services.entry_lifecycle import EntryLifecycleCoordinator

router = APIRouter(prefix="/api/v1/rounds", tags=["rounds"])


@router.get("/{round_id}/state", response_model=RoundStateResponse)
async def get_round_state(
    round_id: UUID,
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    round_, state = await coordinator.get_round_state(round_id)
    return RoundStateResponse(
        round_id=round_.id,
        name=round_.name,
        state=state,
        start_date=round_.start_date,
        end_date=round_.end_date,
    )


@router.get("/{round_id}/entries", response_model=list[EntryResponse])
async def list_round_entries(
    round_id: UUID,
    feed: FeedKind | None = Query(None),
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    """Submitted entries of a round, optionally filtered by feed visibility."""
    entries = await coordinator.list_round_entries(round_id, feed)
    return [EntryResponse.model_validate(e) for e in entries]
