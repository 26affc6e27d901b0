"""
Tests for standings aggregation.
"""

import random
from datetime import datetime, timezone

from app.core.positions import Slot
from app.simulator import Pick, StatLine, ScoringTable, aggregate_standings, current_totals


SUBMITTED = datetime(2026, 1, 8, tzinfo=timezone.utc)


def make_pick(member_id, week, slot, player_id):
    return Pick(member_id, week, slot, player_id, SUBMITTED)


PICKS = [
    make_pick("a", 1, Slot.QB, 10),
    make_pick("a", 1, Slot.RB, 20),
    make_pick("a", 2, Slot.QB, 11),
    make_pick("b", 1, Slot.QB, 10),
    make_pick("b", 1, Slot.FLEX, 30),
]

STATS = {
    (10, 1): StatLine(pass_yards=300, pass_tds=3),
    (20, 1): StatLine(rush_yards=100, rush_tds=1),
    (30, 1): StatLine(rec_yards=80, rec_tds=1),
}


class TestAggregateStandings:
    """Tests for aggregate_standings()."""

    def test_sums_realized_points(self):
        standings = aggregate_standings(["a", "b"], PICKS, STATS)

        assert standings["a"].current_points == 43.0
        assert standings["b"].current_points == 41.0

    def test_unscored_picks_are_pending(self):
        standings = aggregate_standings(["a", "b"], PICKS, STATS)

        assert standings["a"].pending_picks == ((2, 11),)
        assert standings["a"].pending_weeks == 1
        assert standings["a"].used_player_ids == {10, 20, 11}
        assert standings["b"].pending_picks == ()

    def test_members_without_picks(self):
        standings = aggregate_standings(["a", "b", "c"], PICKS, STATS)

        assert standings["c"].current_points == 0.0
        assert standings["c"].used_player_ids == frozenset()

    def test_picks_from_non_members_are_ignored(self):
        standings = aggregate_standings(["a"], PICKS, STATS)
        assert set(standings) == {"a"}

    def test_idempotent(self):
        first = aggregate_standings(["a", "b"], PICKS, STATS)
        second = aggregate_standings(["a", "b"], PICKS, STATS)
        assert first == second

    def test_order_independent(self):
        shuffled = list(PICKS)
        random.Random(7).shuffle(shuffled)

        assert (
            aggregate_standings(["a", "b"], shuffled, STATS)
            == aggregate_standings(["a", "b"], PICKS, STATS)
        )

    def test_counted_weeks_limits_picks(self):
        standings = aggregate_standings(["a"], PICKS, STATS, counted_weeks={2})

        assert standings["a"].current_points == 0.0
        assert standings["a"].used_player_ids == {11}
        assert standings["a"].pending_picks == ((2, 11),)

    def test_custom_table(self):
        table = ScoringTable(pass_td_points=4)
        standings = aggregate_standings(["b"], PICKS, STATS, table)
        assert standings["b"].current_points == 38.0


def test_current_totals():
    assert current_totals(["a", "b"], PICKS, STATS) == {"a": 43.0, "b": 41.0}
