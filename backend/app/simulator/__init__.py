"""
Playoff Pick'em domain model and odds simulator.

Monte Carlo simulation to calculate each league member's chance of finishing first.
"""

from .models import (
    Member,
    Week,
    Pick,
    StatLine,
    PlayerProjection,
    MemberStanding,
    MemberState,
    SimulationResult,
    SimulationRun,
)
from .scoring import ScoringTable, DEFAULT_SCORING, points, round_points
from .week_window import WeekStatus, get_week_status, is_window_open, current_open_week
from .ledger import (
    PickLedger,
    PickError,
    AlreadySubmittedError,
    PlayerAlreadyUsedError,
    DeadlinePassedError,
    InvalidSlotError,
)
from .reveal import (
    PickRevealResult,
    calculate_pick_reveal_status,
    can_view_picks,
    filter_picks_by_reveal_status,
)
from .projections import (
    ProjectionProvider,
    ProjectionSnapshot,
    ProjectionDataError,
    GameResult,
    build_snapshot,
    blend_projection,
    eliminated_team_ids,
    sanitize_projection,
)
from .schedule import WeekProgress, determine_progress, first_kickoff_for_week
from .standings import aggregate_standings, current_totals
from .engine import (
    simulate_win_probabilities,
    equalize_identical_states,
    apply_win_counts,
    format_probability,
    SimulationCancelledError,
)

__all__ = [
    # Models
    "Member",
    "Week",
    "Pick",
    "StatLine",
    "PlayerProjection",
    "MemberStanding",
    "MemberState",
    "SimulationResult",
    "SimulationRun",
    # Scoring
    "ScoringTable",
    "DEFAULT_SCORING",
    "points",
    "round_points",
    # Week window
    "WeekStatus",
    "get_week_status",
    "is_window_open",
    "current_open_week",
    # Ledger
    "PickLedger",
    "PickError",
    "AlreadySubmittedError",
    "PlayerAlreadyUsedError",
    "DeadlinePassedError",
    "InvalidSlotError",
    # Reveal
    "PickRevealResult",
    "calculate_pick_reveal_status",
    "can_view_picks",
    "filter_picks_by_reveal_status",
    # Projections
    "ProjectionProvider",
    "ProjectionSnapshot",
    "ProjectionDataError",
    "GameResult",
    "build_snapshot",
    "blend_projection",
    "eliminated_team_ids",
    "sanitize_projection",
    # Schedule
    "WeekProgress",
    "determine_progress",
    "first_kickoff_for_week",
    # Standings
    "aggregate_standings",
    "current_totals",
    # Engine
    "simulate_win_probabilities",
    "equalize_identical_states",
    "apply_win_counts",
    "format_probability",
    "SimulationCancelledError",
]
