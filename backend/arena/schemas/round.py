"""Round Schemas — clock-derived state and sweep report."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from arena.core.domain_types import RoundState


class RoundStateResponse(BaseModel):
    round_id: UUID
    name: str
    state: RoundState
    start_date: datetime
    end_date: datetime


class SweepResponse(BaseModel):
    normal_feed_revealed: int
    competition_feed_repaired: int
    updated: int
