"""Entry Gates — submission, modification and media-rule checks.

Invariants:
    - Submit requires the round not ENDED; edit/delete require UPCOMING strictly
    - A round that has gone ACTIVE freezes existing entries even though it accepts new ones
    - Gates are PURE: they raise typed errors and never touch the database

Design Decisions:
    - Asymmetric gates: existing commitments must not change once judging/visibility
      has begun, but late joiners may still submit during the active window
    - Media rules checked here so submit and edit share one definition
"""

from arena.core.domain_types import CompetitionMediaType, MediaKind, RoundState
from arena.core.errors import (
    DuplicateSubmissionError, MediaRejectedError, RoundEndedError,
    RoundLockedError, ErrorContext,
)


def check_submission_allowed(
    state: RoundState, round_id: str, existing_entry_id: str | None = None,
) -> None:
    """Submit gate: round not ended and no populated entry yet."""
    if state is RoundState.ENDED:
        raise RoundEndedError(round_id)
    if existing_entry_id is not None:
        raise DuplicateSubmissionError(
            existing_entry_id, ErrorContext(round_id=round_id),
        )


def check_modification_allowed(
    state: RoundState, round_id: str, entry_id: str | None = None,
) -> None:
    """Edit/delete gate: only while the round has not started."""
    if state is not RoundState.UPCOMING:
        raise RoundLockedError(
            round_id, ErrorContext(round_id=round_id, entry_id=entry_id),
        )


def check_media_allowed(
    media_type: CompetitionMediaType,
    media_kind: MediaKind,
    duration_seconds: float | None = None,
    max_duration_seconds: int | None = None,
) -> None:
    """Reject media the competition does not accept."""
    if media_type is CompetitionMediaType.IMAGE_ONLY and media_kind is MediaKind.VIDEO:
        raise MediaRejectedError("This competition only accepts images")
    if media_type is CompetitionMediaType.VIDEO_ONLY and media_kind is MediaKind.IMAGE:
        raise MediaRejectedError("This competition only accepts videos")
    if (
        media_kind is MediaKind.VIDEO
        and max_duration_seconds
        and duration_seconds is not None
        and duration_seconds > max_duration_seconds
    ):
        raise MediaRejectedError(
            f"Video duration ({round(duration_seconds)} seconds) exceeds the "
            f"maximum allowed duration ({max_duration_seconds} seconds)",
        )
