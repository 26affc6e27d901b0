"""
Tests for the Monte Carlo simulation engine.
"""

import random
import threading

import pytest

from app.core.positions import Position
from app.simulator import (
    MemberState,
    PlayerProjection,
    ProjectionSnapshot,
    SimulationCancelledError,
    simulate_win_probabilities,
    equalize_identical_states,
    apply_win_counts,
    format_probability,
)
from app.simulator.engine import rank_pool, simulate_member_future


def make_pool():
    return [
        PlayerProjection(1, Position.QB, 30.0, team_id=1),
        PlayerProjection(2, Position.QB, 20.0, team_id=2),
        PlayerProjection(3, Position.RB, 15.0, team_id=1),
        PlayerProjection(4, Position.RB, 10.0, team_id=2),
        PlayerProjection(5, Position.WR, 12.0, team_id=1),
        PlayerProjection(6, Position.TE, 8.0, team_id=2),
        PlayerProjection(7, Position.WR, 6.0, team_id=2),
    ]


def make_members():
    return [
        MemberState("a", 40.0, frozenset({1})),
        MemberState("b", 35.0, frozenset({3, 5})),
        MemberState("c", 30.0),
    ]


class TestSimulateMemberFuture:
    """Deterministic checks of the greedy policy with zero variance."""

    def future(self, member, weeks, pool=None):
        ranked, lookup, _ = rank_pool(pool or make_pool())
        return simulate_member_future(random.Random(0), member, ranked, lookup, weeks, variance_factor=0)

    def test_picks_best_available(self):
        assert self.future(MemberState("c", 0.0), 1) == 30.0 + 15.0 + 12.0

    def test_used_player_never_selected(self):
        assert self.future(MemberState("a", 0.0, frozenset({1})), 1) == 20.0 + 15.0 + 12.0

    def test_players_used_once_within_trial(self):
        # Week 2 falls back to the second-best player in every slot
        assert self.future(MemberState("c", 0.0), 2) == 57.0 + 20.0 + 10.0 + 8.0

    def test_empty_slot_scores_zero(self):
        # Only two QBs, two RBs and three flex players exist
        assert self.future(MemberState("c", 0.0), 3) == 57.0 + 38.0 + 6.0

    def test_eliminated_players_excluded(self):
        pool = [
            PlayerProjection(1, Position.QB, 30.0, is_eliminated=True),
            PlayerProjection(2, Position.QB, 20.0),
        ]
        assert self.future(MemberState("c", 0.0), 1, pool) == 20.0

    def test_pending_picks_replace_simulated_weeks(self):
        member = MemberState("a", 0.0, frozenset({2, 4}), pending_player_ids=(2, 4), pending_weeks=1)
        assert self.future(member, 1) == 20.0 + 10.0

    def test_pending_pick_without_projection_scores_zero(self):
        member = MemberState("a", 0.0, frozenset({99}), pending_player_ids=(99,), pending_weeks=1)
        assert self.future(member, 1) == 0.0


class TestSimulateWinProbabilities:
    """Tests for simulate_win_probabilities()."""

    def test_decided_outcome(self):
        members = [MemberState("a", 50.0), MemberState("b", 40.0)]
        run = simulate_win_probabilities(members, make_pool(), 0, 1000, seed=99)

        assert run.results["a"].win_probability == 1.0
        assert run.results["a"].display == "100.0%"
        assert run.results["b"].win_probability == 0.0
        assert run.results["b"].display == "<0.1%"

    def test_probabilities_sum_to_one(self):
        run = simulate_win_probabilities(make_members(), make_pool(), 2, 2000, seed=1)

        assert sum(r.wins for r in run.results.values()) == 2000
        assert sum(r.win_probability for r in run.results.values()) == pytest.approx(1.0)

    def test_same_seed_same_counts(self):
        first = simulate_win_probabilities(make_members(), make_pool(), 3, 1000, seed=42)
        second = simulate_win_probabilities(make_members(), make_pool(), 3, 1000, seed=42)
        assert first.win_counts == second.win_counts

    def test_injected_rng(self):
        first = simulate_win_probabilities(make_members(), make_pool(), 3, 500, rng=random.Random(5))
        second = simulate_win_probabilities(make_members(), make_pool(), 3, 500, rng=random.Random(5))
        assert first.win_counts == second.win_counts

    def test_more_points_never_lowers_odds(self):
        base = make_members()
        previous = -1
        for bonus in (0.0, 2.0, 5.0, 10.0, 25.0):
            members = [MemberState("a", base[0].current_points + bonus, base[0].used_player_ids)] + base[1:]
            run = simulate_win_probabilities(members, make_pool(), 2, 1000, seed=3)
            assert run.results["a"].wins >= previous
            previous = run.results["a"].wins

    def test_exact_ties_are_shared(self):
        members = [MemberState("a", 10.0), MemberState("b", 10.0)]
        run = simulate_win_probabilities(members, [], 0, 2000, seed=11)

        # Leaders are chosen at random, not by member order
        assert 800 < run.results["a"].wins < 1200
        assert run.results["a"].wins + run.results["b"].wins == 2000

    def test_no_members(self):
        run = simulate_win_probabilities([], make_pool(), 2, 100, seed=1)
        assert run.results == {}
        assert run.player_pool_size == 7

    def test_clamped_projections_are_counted(self):
        pool = make_pool() + [
            PlayerProjection(8, Position.QB, float("nan")),
            PlayerProjection(9, Position.RB, -4.0),
        ]
        run = simulate_win_probabilities(make_members(), pool, 1, 200, seed=1)

        assert run.data_quality_issues == 2
        assert sum(r.wins for r in run.results.values()) == 200

    def test_snapshot_clamped_count_is_carried(self):
        snapshot = ProjectionSnapshot(players=tuple(make_pool()), clamped=3)
        run = simulate_win_probabilities(make_members(), snapshot, 1, 100, seed=1)
        assert run.data_quality_issues == 3

    def test_progress_reaches_completion(self):
        updates = []
        simulate_win_probabilities(make_members(), make_pool(), 1, 250, seed=1, progress_callback=updates.append)

        assert updates[0] == 0
        assert updates[-1] == 100

    @pytest.mark.parametrize("kwargs", [
        {"n_simulations": 0},
        {"weeks_remaining": -1},
        {"shards": 0},
    ])
    def test_invalid_arguments(self, kwargs):
        args = {"n_simulations": 10, "weeks_remaining": 1}
        args.update(kwargs)
        with pytest.raises(ValueError):
            simulate_win_probabilities(make_members(), make_pool(), **args)


class TestCancellation:
    """Tests for abandoning a run."""

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SimulationCancelledError):
            simulate_win_probabilities(make_members(), make_pool(), 2, 1000, seed=1, cancel_event=cancel)

    def test_cancelled_mid_run(self):
        cancel = threading.Event()

        def on_progress(percent):
            if percent >= 50:
                cancel.set()

        with pytest.raises(SimulationCancelledError):
            simulate_win_probabilities(
                make_members(), make_pool(), 2, 1000, seed=1,
                cancel_event=cancel, progress_callback=on_progress
            )

    def test_sharded_run_cancelled(self):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SimulationCancelledError):
            simulate_win_probabilities(make_members(), make_pool(), 2, 1000, seed=1, shards=4, cancel_event=cancel)


class TestSharding:
    """Tests for splitting trials across threads."""

    def test_sharded_counts_cover_every_trial(self):
        run = simulate_win_probabilities(make_members(), make_pool(), 2, 1001, seed=8, shards=4)
        assert sum(run.win_counts.values()) == 1001

    def test_sharded_run_is_deterministic(self):
        first = simulate_win_probabilities(make_members(), make_pool(), 2, 1000, seed=8, shards=3)
        second = simulate_win_probabilities(make_members(), make_pool(), 2, 1000, seed=8, shards=3)
        assert first.win_counts == second.win_counts


class TestEqualizeIdenticalStates:
    """Tests for equalize_identical_states()."""

    def test_identical_members_share_wins(self):
        members = [
            MemberState("a", 20.0, frozenset({1})),
            MemberState("b", 20.0, frozenset({1})),
            MemberState("c", 10.0),
        ]
        wins = equalize_identical_states(members, {"a": 600, "b": 300, "c": 100})
        assert wins == {"a": 450, "b": 450, "c": 100}

    def test_different_used_players_are_kept_apart(self):
        members = [MemberState("a", 20.0, frozenset({1})), MemberState("b", 20.0, frozenset({2}))]
        wins = equalize_identical_states(members, {"a": 700, "b": 300})
        assert wins == {"a": 700, "b": 300}

    def test_apply_win_counts(self):
        members = [MemberState("a", 20.0), MemberState("b", 20.0)]
        run = simulate_win_probabilities(members, make_pool(), 1, 1000, seed=2)
        apply_win_counts(run, equalize_identical_states(members, run.win_counts))

        assert run.results["a"].win_probability == 0.5
        assert run.results["b"].display == "50.0%"


class TestFormatProbability:
    """Tests for format_probability()."""

    @pytest.mark.parametrize("probability,expected", [
        (0.0, "<0.1%"),
        (0.0009, "<0.1%"),
        (0.001, "0.1%"),
        (0.12345, "12.3%"),
        (0.5, "50.0%"),
        (1.0, "100.0%"),
    ])
    def test_display(self, probability, expected):
        assert format_probability(probability) == expected
