"""
Playoff progress derived from the game schedule.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from .projections import GameResult


@dataclass
class WeekProgress:
    """Where the playoffs stand at a given moment."""

    current_week: int
    season_complete: bool
    games_are_live: bool
    all_games_finished: bool
    first_kickoff: Optional[datetime] = None

    @property
    def current_week_started(self) -> bool:
        """Whether picks for the current week count toward standings yet."""
        return self.games_are_live or self.season_complete


def _real_games(games: Sequence[GameResult], week: int) -> List[GameResult]:
    return [g for g in games if g.week == week and not g.is_placeholder]


def determine_progress(games: Sequence[GameResult], total_weeks: int, now: datetime) -> WeekProgress:
    """
    Find the current playoff week and whether its games are in progress.

    The current week is the first week with no decided games yet or with
    games still to finish. When every week is final the season is complete.

    Args:
        games: Every playoff game of the season
        total_weeks: Number of playoff weeks
        now: Current time

    Returns:
        WeekProgress for `now`
    """
    current_week = None
    for week in range(1, total_weeks + 1):
        week_games = _real_games(games, week)
        if not week_games or not all(g.is_final for g in week_games):
            current_week = week
            break

    if current_week is None:
        last_games = _real_games(games, total_weeks)
        kickoffs = [g.kickoff_at for g in last_games if g.kickoff_at is not None]
        return WeekProgress(
            current_week=total_weeks,
            season_complete=True,
            games_are_live=False,
            all_games_finished=True,
            first_kickoff=min(kickoffs) if kickoffs else None,
        )

    week_games = _real_games(games, current_week)
    kickoffs = [g.kickoff_at for g in week_games if g.kickoff_at is not None]
    first_kickoff = min(kickoffs) if kickoffs else None
    # The current week always has unfinished games, so a started week is live
    has_started = first_kickoff is not None and now >= first_kickoff

    return WeekProgress(
        current_week=current_week,
        season_complete=False,
        games_are_live=has_started,
        all_games_finished=False,
        first_kickoff=first_kickoff,
    )


def first_kickoff_for_week(games: Sequence[GameResult], week: int) -> Optional[datetime]:
    """Kickoff of the first real game of a week, used as the reveal deadline."""
    kickoffs = [g.kickoff_at for g in _real_games(games, week) if g.kickoff_at is not None]
    return min(kickoffs) if kickoffs else None
