"""
Tests for the week submission window.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.positions import Slot
from app.simulator import Pick, Week, WeekStatus, get_week_status, current_open_week, is_window_open


OPEN_AT = datetime(2026, 1, 6, 12, 0, tzinfo=timezone.utc)
DEADLINE_AT = datetime(2026, 1, 10, 21, 30, tzinfo=timezone.utc)
TICK = timedelta(microseconds=1)


@pytest.fixture
def week():
    return Week(index=1, open_at=OPEN_AT, deadline_at=DEADLINE_AT)


def make_pick(week_index=1, submitted_at=OPEN_AT):
    return Pick(member_id="m1", week=week_index, slot=Slot.QB, player_id=10, submitted_at=submitted_at)


class TestGetWeekStatus:
    """Tests for get_week_status()."""

    def test_open_at_is_inclusive(self, week):
        assert get_week_status(week, [], OPEN_AT) == WeekStatus.OPEN_NOT_SUBMITTED

    def test_deadline_is_inclusive(self, week):
        assert get_week_status(week, [], DEADLINE_AT) == WeekStatus.OPEN_NOT_SUBMITTED

    def test_before_open_is_locked(self, week):
        assert get_week_status(week, [], OPEN_AT - TICK) == WeekStatus.FUTURE_LOCKED

    def test_after_deadline_without_picks(self, week):
        assert get_week_status(week, [], DEADLINE_AT + TICK) == WeekStatus.PAST_NO_PICKS

    @pytest.mark.parametrize("now", [
        OPEN_AT - timedelta(days=3),
        OPEN_AT,
        DEADLINE_AT,
        DEADLINE_AT + timedelta(days=30),
    ])
    def test_any_pick_means_submitted(self, week, now):
        assert get_week_status(week, [make_pick()], now) == WeekStatus.SUBMITTED

    def test_accepts_generator(self, week):
        picks = (p for p in [make_pick()])
        assert get_week_status(week, picks, DEADLINE_AT + TICK) == WeekStatus.SUBMITTED


class TestCurrentOpenWeek:
    """Tests for current_open_week()."""

    def test_first_open_week_in_schedule_order(self):
        weeks = [
            Week(index=1, open_at=OPEN_AT, deadline_at=DEADLINE_AT),
            Week(index=2, open_at=OPEN_AT, deadline_at=DEADLINE_AT + timedelta(days=7)),
        ]
        assert current_open_week(weeks, DEADLINE_AT).index == 1
        assert current_open_week(weeks, DEADLINE_AT + TICK).index == 2

    def test_none_when_between_windows(self, week):
        assert current_open_week([week], DEADLINE_AT + timedelta(hours=1)) is None

    def test_empty_schedule(self):
        assert current_open_week([], OPEN_AT) is None


def test_is_window_open_bounds(week):
    assert is_window_open(week, OPEN_AT)
    assert is_window_open(week, DEADLINE_AT)
    assert not is_window_open(week, DEADLINE_AT + TICK)
