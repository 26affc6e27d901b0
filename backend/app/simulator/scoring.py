"""
Fantasy scoring rules.

Converts a realized stat line into fantasy points under a scoring table.
Rushing and receiving production are added together so RB/WR/TE lines
score the same way regardless of how the yards were gained.
"""

from dataclasses import dataclass, fields
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Union

from .models import StatLine


@dataclass(frozen=True)
class ScoringTable:
    """Yards-per-point divisors and per-event point values."""

    pass_yds_per_point: float = 25
    rush_yds_per_point: float = 10
    rec_yds_per_point: float = 10
    pass_td_points: float = 5
    rush_td_points: float = 6
    rec_td_points: float = 6
    interception_points: float = -2
    fumble_lost_points: float = -2
    two_pt_conversion_points: float = 2

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "ScoringTable":
        """Build a table from a stored settings row, keeping defaults for absent keys."""
        values = {}
        for f in fields(cls):
            if row.get(f.name) is not None:
                values[f.name] = float(row[f.name])
        return cls(**values)


DEFAULT_SCORING = ScoringTable()

_TWO_PLACES = Decimal("0.01")


def _stat(stats: Union[StatLine, Mapping[str, Any]], name: str) -> float:
    if isinstance(stats, StatLine):
        value = getattr(stats, name)
    else:
        value = stats.get(name)
    return float(value) if value is not None else 0.0


def _per_yard(yards: float, divisor: float) -> float:
    return yards / divisor if divisor else 0.0


def round_points(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    return float(Decimal(repr(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def points(
    stats: Union[StatLine, Mapping[str, Any]],
    table: ScoringTable = DEFAULT_SCORING
) -> float:
    """
    Score a stat line.

    Args:
        stats: A StatLine or a mapping of snake_case stat names; missing
            fields count as zero
        table: Scoring table to apply

    Returns:
        Fantasy points rounded once to two decimals. May be negative.
    """
    total = (
        _per_yard(_stat(stats, "pass_yards"), table.pass_yds_per_point)
        + _stat(stats, "pass_tds") * table.pass_td_points
        + _per_yard(_stat(stats, "rush_yards"), table.rush_yds_per_point)
        + _stat(stats, "rush_tds") * table.rush_td_points
        + _per_yard(_stat(stats, "rec_yards"), table.rec_yds_per_point)
        + _stat(stats, "rec_tds") * table.rec_td_points
        + _stat(stats, "interceptions") * table.interception_points
        + _stat(stats, "fumbles_lost") * table.fumble_lost_points
        + _stat(stats, "two_pt_conversions") * table.two_pt_conversion_points
    )
    return round_points(total)
