"""
Data models for the pick game and the odds simulator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Optional, Tuple

from ..core.positions import Position, Slot


PlayerId = int
MemberId = str


@dataclass(frozen=True)
class Member:
    """A league member. Display attributes are owned by the profile system."""

    id: MemberId
    display_name: str = "Unknown"
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class Week:
    """A playoff week and its pick window (both ends inclusive)."""

    index: int
    open_at: datetime
    deadline_at: datetime


@dataclass(frozen=True)
class Pick:
    """A committed pick. Picks are never mutated after creation."""

    member_id: MemberId
    week: int
    slot: Slot
    player_id: PlayerId
    submitted_at: datetime


@dataclass(frozen=True)
class StatLine:
    """A player's realized statistical line for one game."""

    pass_yards: float = 0
    pass_tds: int = 0
    rush_yards: float = 0
    rush_tds: int = 0
    rec_yards: float = 0
    rec_tds: int = 0
    interceptions: int = 0
    fumbles_lost: int = 0
    two_pt_conversions: int = 0


@dataclass(frozen=True)
class PlayerProjection:
    """Projected points and elimination status for one rosterable player."""

    player_id: PlayerId
    position: Position
    projected_points: float
    is_eliminated: bool = False
    team_id: Optional[int] = None
    name: Optional[str] = None


@dataclass
class MemberStanding:
    """A member's realized state derived from picks and stats."""

    member_id: MemberId
    current_points: float = 0.0
    used_player_ids: FrozenSet[PlayerId] = frozenset()
    # Picks committed for weeks whose stats are not in yet, as (week, player_id)
    pending_picks: Tuple[Tuple[int, PlayerId], ...] = ()

    @property
    def pending_weeks(self) -> int:
        return len({week for week, _ in self.pending_picks})


@dataclass(frozen=True)
class MemberState:
    """Per-member input to the simulator."""

    member_id: MemberId
    current_points: float
    used_player_ids: FrozenSet[PlayerId] = frozenset()
    pending_player_ids: Tuple[PlayerId, ...] = ()
    pending_weeks: int = 0

    @classmethod
    def from_standing(cls, standing: MemberStanding) -> "MemberState":
        return cls(
            member_id=standing.member_id,
            current_points=standing.current_points,
            used_player_ids=frozenset(standing.used_player_ids),
            pending_player_ids=tuple(pid for _, pid in standing.pending_picks),
            pending_weeks=standing.pending_weeks,
        )


@dataclass
class SimulationResult:
    """Simulated win odds for one member."""

    member_id: MemberId
    current_points: float
    wins: float = 0
    win_probability: float = 0.0
    display: str = "<0.1%"


@dataclass
class SimulationRun:
    """Outcome of one Monte Carlo run."""

    n_simulations: int
    weeks_remaining: int
    results: Dict[MemberId, SimulationResult] = field(default_factory=dict)
    player_pool_size: int = 0
    data_quality_issues: int = 0

    @property
    def win_counts(self) -> Dict[MemberId, float]:
        return {mid: r.wins for mid, r in self.results.items()}
