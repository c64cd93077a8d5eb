"""Round Clock — tests for wall-clock derived round state.

Tests cover:
    - UPCOMING strictly before start_date
    - ACTIVE on both inclusive boundaries
    - ENDED strictly after end_date
    - Naive datetimes treated as UTC, aware ones normalized
    - has_started for every state
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from arena.core.domain_types import RoundState
from arena.core.round_clock import (
    ensure_utc, has_started, round_state, state_of, utcnow,
)

START = datetime(2024, 1, 10, tzinfo=timezone.utc)
END = datetime(2024, 1, 20, tzinfo=timezone.utc)


@dataclass
class _Window:
    start_date: datetime
    end_date: datetime


# ─── round_state ─────────────────────────────────────────────────

def test_upcoming_before_start():
    assert round_state(START, END, datetime(2024, 1, 5, tzinfo=timezone.utc)) is RoundState.UPCOMING


def test_upcoming_one_microsecond_before_start():
    now = START - timedelta(microseconds=1)
    assert round_state(START, END, now) is RoundState.UPCOMING


def test_active_at_start_boundary():
    assert round_state(START, END, START) is RoundState.ACTIVE


def test_active_at_end_boundary():
    assert round_state(START, END, END) is RoundState.ACTIVE


def test_active_one_second_after_start():
    now = datetime(2024, 1, 10, 0, 0, 1, tzinfo=timezone.utc)
    assert round_state(START, END, now) is RoundState.ACTIVE


def test_ended_one_second_after_end():
    now = datetime(2024, 1, 20, 0, 0, 1, tzinfo=timezone.utc)
    assert round_state(START, END, now) is RoundState.ENDED


def test_zero_length_window_is_active_only_at_the_instant():
    assert round_state(START, START, START) is RoundState.ACTIVE
    assert round_state(START, START, START + timedelta(seconds=1)) is RoundState.ENDED


def test_default_now_uses_wall_clock():
    now = utcnow()
    assert round_state(now - timedelta(days=1), now + timedelta(days=1)) is RoundState.ACTIVE
    assert round_state(now + timedelta(days=1), now + timedelta(days=2)) is RoundState.UPCOMING


# ─── timezone handling ───────────────────────────────────────────

def test_naive_datetime_treated_as_utc():
    naive = datetime(2024, 1, 10)
    assert ensure_utc(naive) == START


def test_aware_datetime_converted_to_utc():
    plus_two = timezone(timedelta(hours=2))
    local = datetime(2024, 1, 10, 2, 0, tzinfo=plus_two)
    assert ensure_utc(local) == START
    assert ensure_utc(local).tzinfo == timezone.utc


def test_naive_stored_dates_compare_with_aware_now():
    window = _Window(datetime(2024, 1, 10), datetime(2024, 1, 20))
    assert state_of(window, START - timedelta(seconds=1)) is RoundState.UPCOMING
    assert state_of(window, START) is RoundState.ACTIVE


# ─── has_started ─────────────────────────────────────────────────

def test_has_started_false_when_upcoming():
    assert not has_started(_Window(START, END), START - timedelta(days=1))


def test_has_started_true_when_active():
    assert has_started(_Window(START, END), START)


def test_has_started_true_when_ended():
    assert has_started(_Window(START, END), END + timedelta(days=1))
