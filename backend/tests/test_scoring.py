"""
Tests for fantasy scoring.
"""

import pytest

from app.simulator import ScoringTable, DEFAULT_SCORING, StatLine, points, round_points


class TestPoints:
    """Tests for points() under the default table."""

    @pytest.mark.parametrize("stats,expected", [
        ({"pass_yards": 300, "pass_tds": 3}, 27.0),
        ({"rush_yards": 100, "rush_tds": 1}, 16.0),
        ({"rec_yards": 120, "rec_tds": 2}, 24.0),
        ({"rush_yards": 50, "rec_yards": 75, "rush_tds": 1}, 18.5),
        ({"interceptions": 3, "fumbles_lost": 2}, -10.0),
        ({}, 0.0),
    ])
    def test_default_table(self, stats, expected):
        assert points(stats) == expected

    def test_stat_line(self):
        line = StatLine(pass_yards=274, pass_tds=3, interceptions=1, two_pt_conversions=1)
        assert points(line) == 25.96

    def test_missing_and_none_fields_are_zero(self):
        assert points({"pass_yards": None, "rush_tds": 1}) == 6.0

    def test_negative_total_not_clamped(self):
        assert points(StatLine(interceptions=4)) == -8.0

    def test_rounds_once_at_the_end(self):
        # Each term is a third of a point; rounding per term would give 0.99
        table = ScoringTable(pass_yds_per_point=3, rush_yds_per_point=3, rec_yds_per_point=3)
        assert points({"pass_yards": 1, "rush_yards": 1, "rec_yards": 1}, table) == 1.0

    def test_zero_divisor_scores_nothing(self):
        table = ScoringTable(pass_yds_per_point=0)
        assert points({"pass_yards": 300, "pass_tds": 1}, table) == 5.0


class TestScoringTable:
    """Tests for ScoringTable."""

    def test_from_mapping_ignores_unknown_keys(self):
        table = ScoringTable.from_mapping({"id": 1, "is_active": True, "pass_td_points": 4})
        assert table.pass_td_points == 4.0
        assert table.rush_td_points == DEFAULT_SCORING.rush_td_points

    def test_from_mapping_keeps_defaults_for_none(self):
        table = ScoringTable.from_mapping({"pass_yds_per_point": None})
        assert table == DEFAULT_SCORING


class TestRoundPoints:
    """Tests for round_points()."""

    def test_half_rounds_up(self):
        assert round_points(2.675) == 2.68

    def test_half_rounds_away_from_zero(self):
        assert round_points(-1.005) == -1.01
