"""Cron Routes — externally triggered visibility reconciliation.

Invariants:
    - When cron_api_key is configured, X-API-Key must match it (401 otherwise)
    - The sweep is idempotent; calling it repeatedly is harmless
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status

from arena.api.dependencies import get_coordinator
from arena.config import Settings, get_settings
from arena.schemas.round import SweepResponse
from arena.services.entry_lifecycle import EntryLifecycleCoordinator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cron", tags=["cron"])


def _check_api_key(expected: str | None, provided: str | None) -> None:
    if expected is None:
        return
    if provided is None or not hmac.compare_digest(expected, provided):
        logger.warning("Cron sweep rejected: invalid API key")
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.post("/visibility-sweep", response_model=SweepResponse)
async def visibility_sweep(
    x_api_key: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    coordinator: EntryLifecycleCoordinator = Depends(get_coordinator),
):
    _check_api_key(settings.cron_api_key, x_api_key)
    result = await coordinator.run_visibility_sweep()
    return SweepResponse(
        normal_feed_revealed=result.normal_feed_revealed,
        competition_feed_repaired=result.competition_feed_repaired,
        updated=result.updated,
    )
