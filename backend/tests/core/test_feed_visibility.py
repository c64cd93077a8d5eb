"""Feed Visibility — tests for flag projection.

Tests cover:
    - Empty entries hidden from both feeds in every state
    - Competition feed visible as soon as content exists
    - Normal feed visible only once the round has started
"""

import pytest

from arena.core.domain_types import RoundState
from arena.core.feed_visibility import HIDDEN, VisibilityFlags, project


@pytest.mark.parametrize("state", list(RoundState))
def test_no_content_is_hidden(state):
    assert project(False, state) == HIDDEN


def test_upcoming_entry_only_in_competition_feed():
    flags = project(True, RoundState.UPCOMING)
    assert flags.competition_feed is True
    assert flags.normal_feed is False


@pytest.mark.parametrize("state", [RoundState.ACTIVE, RoundState.ENDED])
def test_started_entry_in_both_feeds(state):
    assert project(True, state) == VisibilityFlags(True, True)
