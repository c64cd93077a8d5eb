"""Entry Gates — tests for submission, modification and media checks.

Tests cover:
    - Submit allowed while UPCOMING and ACTIVE, rejected when ENDED
    - Duplicate detection when a populated entry exists
    - Edit/delete allowed only while UPCOMING
    - Media-type and duration rules
"""

import pytest

from arena.core.domain_types import CompetitionMediaType, MediaKind, RoundState
from arena.core.enforce_entry import (
    check_media_allowed, check_modification_allowed, check_submission_allowed,
)
from arena.core.errors import (
    DuplicateSubmissionError, MediaRejectedError, RoundEndedError, RoundLockedError,
)


# ─── check_submission_allowed ────────────────────────────────────

@pytest.mark.parametrize("state", [RoundState.UPCOMING, RoundState.ACTIVE])
def test_submission_allowed_before_end(state):
    check_submission_allowed(state, "r1")


def test_submission_rejected_after_end():
    with pytest.raises(RoundEndedError) as exc:
        check_submission_allowed(RoundState.ENDED, "r1")
    assert exc.value.code == "ROUND_ENDED"
    assert exc.value.context.round_id == "r1"


def test_submission_rejected_when_entry_exists():
    with pytest.raises(DuplicateSubmissionError) as exc:
        check_submission_allowed(RoundState.ACTIVE, "r1", existing_entry_id="e1")
    assert exc.value.context.entry_id == "e1"
    assert exc.value.http_status == 409


def test_ended_takes_precedence_over_duplicate():
    with pytest.raises(RoundEndedError):
        check_submission_allowed(RoundState.ENDED, "r1", existing_entry_id="e1")


# ─── check_modification_allowed ──────────────────────────────────

def test_modification_allowed_when_upcoming():
    check_modification_allowed(RoundState.UPCOMING, "r1", "e1")


@pytest.mark.parametrize("state", [RoundState.ACTIVE, RoundState.ENDED])
def test_modification_locked_once_started(state):
    with pytest.raises(RoundLockedError) as exc:
        check_modification_allowed(state, "r1", "e1")
    assert exc.value.code == "ROUND_LOCKED"
    assert exc.value.context.entry_id == "e1"


# ─── check_media_allowed ─────────────────────────────────────────

def test_image_accepted_by_both():
    check_media_allowed(CompetitionMediaType.BOTH, MediaKind.IMAGE)


def test_video_rejected_by_image_only():
    with pytest.raises(MediaRejectedError, match="only accepts images"):
        check_media_allowed(CompetitionMediaType.IMAGE_ONLY, MediaKind.VIDEO)


def test_image_rejected_by_video_only():
    with pytest.raises(MediaRejectedError, match="only accepts videos"):
        check_media_allowed(CompetitionMediaType.VIDEO_ONLY, MediaKind.IMAGE)


def test_video_over_max_duration_rejected():
    with pytest.raises(MediaRejectedError) as exc:
        check_media_allowed(CompetitionMediaType.BOTH, MediaKind.VIDEO, 61, 60)
    assert exc.value.http_status == 400


def test_video_at_max_duration_accepted():
    check_media_allowed(CompetitionMediaType.VIDEO_ONLY, MediaKind.VIDEO, 60, 60)


def test_video_without_duration_accepted():
    check_media_allowed(CompetitionMediaType.BOTH, MediaKind.VIDEO, None, 60)


def test_no_duration_limit_accepts_long_video():
    check_media_allowed(CompetitionMediaType.BOTH, MediaKind.VIDEO, 3600, None)
