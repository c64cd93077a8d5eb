"""Round Clock — derives a round's temporal state from wall-clock comparisons.

Invariants:
    - PURE: no stored state, no caching; callers evaluate at the moment of decision
    - UPCOMING when now < start, ACTIVE when start <= now <= end, ENDED when now > end
    - Naive datetimes are interpreted as UTC (SQLite returns naive values)

Design Decisions:
    - Reference instant is a parameter defaulting to now: tests pin time without patching
"""

from datetime import datetime, timezone
from typing import Protocol

from arena.core.domain_types import RoundState


class RoundWindow(Protocol):
    """Anything carrying a start/end pair (ORM Round, schema, test stub)."""
    start_date: datetime
    end_date: datetime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def round_state(
    start_date: datetime, end_date: datetime, now: datetime | None = None,
) -> RoundState:
    """Classify `now` against the [start_date, end_date] window."""
    current = ensure_utc(now) if now is not None else utcnow()
    if current < ensure_utc(start_date):
        return RoundState.UPCOMING
    if current > ensure_utc(end_date):
        return RoundState.ENDED
    return RoundState.ACTIVE


def state_of(round_: RoundWindow, now: datetime | None = None) -> RoundState:
    return round_state(round_.start_date, round_.end_date, now)


def has_started(round_: RoundWindow, now: datetime | None = None) -> bool:
    return state_of(round_, now) is not RoundState.UPCOMING
