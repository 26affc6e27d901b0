"""
Week submission window.

A member's status for a week is recomputed from the schedule, the member's
picks for that week, and the current time. Nothing here reads the system
clock; callers pass `now`.
"""

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence

from .models import Week, Pick


class WeekStatus(str, Enum):
    """Status of a week from one member's point of view."""
    FUTURE_LOCKED = "FUTURE_LOCKED"
    OPEN_NOT_SUBMITTED = "OPEN_NOT_SUBMITTED"
    SUBMITTED = "SUBMITTED"
    PAST_NO_PICKS = "PAST_NO_PICKS"


def is_window_open(week: Week, now: datetime) -> bool:
    """Check whether `now` falls inside the week's window, inclusive on both ends."""
    return week.open_at <= now <= week.deadline_at


def get_week_status(week: Week, picks_for_week: Iterable[Pick], now: datetime) -> WeekStatus:
    """
    Compute a member's status for a week.

    Evaluated in order:
    1. Any pick recorded -> SUBMITTED (even past the deadline)
    2. Inside [open_at, deadline_at] -> OPEN_NOT_SUBMITTED
    3. Before open_at -> FUTURE_LOCKED
    4. Otherwise -> PAST_NO_PICKS

    Args:
        week: The scheduled week
        picks_for_week: The member's picks for this week
        now: Current time

    Returns:
        The member's WeekStatus
    """
    if any(True for _ in picks_for_week):
        return WeekStatus.SUBMITTED
    if is_window_open(week, now):
        return WeekStatus.OPEN_NOT_SUBMITTED
    if now < week.open_at:
        return WeekStatus.FUTURE_LOCKED
    return WeekStatus.PAST_NO_PICKS


def current_open_week(weeks: Sequence[Week], now: datetime) -> Optional[Week]:
    """Return the first week in schedule order whose window is open, or None."""
    for week in weeks:
        if is_window_open(week, now):
            return week
    return None
