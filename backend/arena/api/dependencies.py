"""Route Dependencies — coordinator wiring and caller identity.

Invariants:
    - One coordinator per request, bound to the process-wide session factory
    - Caller identity arrives from the upstream identity service in X-User-Id
"""

from fastapi import Depends, Header

from arena.config import Settings, get_settings
import arena.infrastructure.database as db_module
from arena.services.entry_lifecycle import EntryLifecycleCoordinator


def get_coordinator(
    settings: Settings = Depends(get_settings),
) -> EntryLifecycleCoordinator:
    return EntryLifecycleCoordinator(
        db_module.get_db_manager().session_factory, settings,
    )


def require_user_id(
    x_user_id: str = Header(..., min_length=1, max_length=64),
) -> str:
    return x_user_id


def optional_user_id(
    x_user_id: str | None = Header(None, max_length=64),
) -> str | None:
    return x_user_id or None
