"""Feed Visibility Projection — the two denormalized flags as a function of round state.

Invariants:
    - visible_in_competition_feed == (post_id is not None)
    - visible_in_normal_feed == (post_id is not None and round has started)
    - An entry without content is invisible in both feeds

Design Decisions:
    - Flags persisted for cheap feed reads; this module is the single source of
      the truth they cache (ADR: write-time projection + periodic sweep)
"""

from dataclasses import dataclass

from arena.core.domain_types import RoundState


@dataclass(frozen=True)
class VisibilityFlags:
    competition_feed: bool
    normal_feed: bool


HIDDEN = VisibilityFlags(competition_feed=False, normal_feed=False)


def project(has_content: bool, state: RoundState) -> VisibilityFlags:
    """Flags an entry should carry right now."""
    if not has_content:
        return HIDDEN
    return VisibilityFlags(
        competition_feed=True,
        normal_feed=state is not RoundState.UPCOMING,
    )

