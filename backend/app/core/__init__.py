"""
Core enums, settings and utilities.
"""

from .positions import (
    Position,
    Slot,
    SLOT_ORDER,
    SLOT_POSITIONS,
    is_eligible,
    get_current_season,
)
from .logging_config import setup_logging
from . import settings

__all__ = [
    "Position",
    "Slot",
    "SLOT_ORDER",
    "SLOT_POSITIONS",
    "is_eligible",
    "get_current_season",
    "setup_logging",
    "settings",
]
