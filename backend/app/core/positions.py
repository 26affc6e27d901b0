"""
Position and slot enums plus season utilities for the playoff pick game.
"""

from enum import Enum
from datetime import datetime
from typing import Dict, FrozenSet, Optional


class Position(str, Enum):
    """Rosterable player positions."""
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"


class Slot(str, Enum):
    """Weekly pick slots every member must fill."""
    QB = "QB"
    RB = "RB"
    FLEX = "FLEX"


# Slots are filled in this order each week
SLOT_ORDER = (Slot.QB, Slot.RB, Slot.FLEX)

# Positions that may fill each slot
SLOT_POSITIONS: Dict[Slot, FrozenSet[Position]] = {
    Slot.QB: frozenset({Position.QB}),
    Slot.RB: frozenset({Position.RB}),
    Slot.FLEX: frozenset({Position.WR, Position.TE}),
}

# Projection used when a player has no usable history
POSITION_DEFAULT_POINTS: Dict[Position, float] = {
    Position.QB: 15.0,
    Position.RB: 8.0,
    Position.WR: 8.0,
    Position.TE: 5.0,
}
FALLBACK_DEFAULT_POINTS = 5.0


def is_eligible(position: Position, slot: Slot) -> bool:
    """Check whether a player at `position` can fill `slot`."""
    return Position(position) in SLOT_POSITIONS[Slot(slot)]


def get_current_season(now: Optional[datetime] = None) -> int:
    """
    Get the football season a given moment belongs to.

    NFL season: Sept-Dec = current year, Jan-Feb = previous year
    (the playoffs run in January and February of the following year).

    Args:
        now: The moment to evaluate (defaults to the current time)

    Returns:
        The season year
    """
    if now is None:
        now = datetime.now()

    if now.month <= 2:
        return now.year - 1
    return now.year
