"""
Player projections consumed by the odds simulator.

Projections come from an external collaborator. The simulator only ever sees
an immutable snapshot taken once per run.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Set, Tuple

from ..core.positions import Position, POSITION_DEFAULT_POINTS, FALLBACK_DEFAULT_POINTS
from .models import PlayerProjection


logger = logging.getLogger(__name__)

# Weight given to in-playoff form when blending with regular season form
PLAYOFF_WEIGHT = 0.6

FINAL_GAME_STATUSES = frozenset({"FT", "AOT"})


@dataclass(frozen=True)
class ProjectionSnapshot:
    """Read-only projection data for one simulation run."""

    players: Tuple[PlayerProjection, ...]
    eliminated_team_ids: frozenset = frozenset()
    # Projections clamped to zero while building the snapshot
    clamped: int = 0
    version: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __len__(self) -> int:
        return len(self.players)


@dataclass(frozen=True)
class GameResult:
    """A playoff game as seen by the elimination check."""

    week: int
    home_team_id: int
    away_team_id: int
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: Optional[str] = None
    kickoff_at: Optional[datetime] = None

    @property
    def is_placeholder(self) -> bool:
        """Bracket slots whose teams are not decided yet."""
        return self.home_team_id <= 0 or self.away_team_id <= 0

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_GAME_STATUSES


class ProjectionProvider(ABC):
    """Source of player projections and team elimination status."""

    @abstractmethod
    async def fetch_projections(self, season: int) -> ProjectionSnapshot:
        """
        Fetch a consistent snapshot of every rosterable player's projection.

        Args:
            season: The season year

        Returns:
            ProjectionSnapshot with elimination flags already applied
        """
        pass

    @abstractmethod
    async def fetch_eliminated_teams(self, season: int) -> Set[int]:
        """Return the ids of teams that have been knocked out."""
        pass


class ProjectionDataError(Exception):
    """Raised when projection data is malformed beyond repair."""
    pass


def eliminated_team_ids(games: Iterable[GameResult]) -> Set[int]:
    """Teams that lost a finished game. Ties and games in progress eliminate nobody."""
    eliminated = set()
    for game in games:
        if not game.is_final:
            continue
        if game.home_score is None or game.away_score is None:
            continue
        if game.home_score < game.away_score:
            eliminated.add(game.home_team_id)
        elif game.away_score < game.home_score:
            eliminated.add(game.away_team_id)
    return eliminated


def blend_projection(
    playoff_avg: float,
    playoff_games: int,
    regular_avg: Optional[float],
    regular_games: int,
    position: Any
) -> Tuple[float, str]:
    """
    Blend playoff and regular season averages into a projection.

    Returns:
        Tuple of (projected points, projection source label)
    """
    has_playoff = playoff_games > 0
    has_regular = regular_avg is not None and regular_games > 0

    if has_playoff and has_regular:
        return playoff_avg * PLAYOFF_WEIGHT + regular_avg * (1 - PLAYOFF_WEIGHT), "blend"
    if has_playoff:
        return playoff_avg, "playoff_only"
    if has_regular:
        return regular_avg, "regular_season_only"

    try:
        default = POSITION_DEFAULT_POINTS[Position(position)]
    except ValueError:
        default = FALLBACK_DEFAULT_POINTS
    return default, "position_default"


def sanitize_projection(value: Any) -> Tuple[float, bool]:
    """
    Clamp an unusable projection to zero.

    Returns:
        Tuple of (usable value, whether it had to be clamped)
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0, True
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0, True
    return number, False


def build_snapshot(
    rows: Iterable[Any],
    eliminated: Iterable[int] = ()
) -> ProjectionSnapshot:
    """
    Turn raw projection rows into a snapshot.

    Rows need `player_id`, `position`, `projected_pts` and `team_id`
    attributes (an optional `name`). Rows without a projection are left
    out; rows with an unknown position are skipped.
    """
    eliminated = frozenset(eliminated)
    players = []
    clamped = 0
    missing = 0

    for row in rows:
        if row.projected_pts is None:
            missing += 1
            continue
        try:
            position = Position(row.position)
        except ValueError:
            logger.warning("Skipping player %s with unknown position %r", row.player_id, row.position)
            continue

        value, was_clamped = sanitize_projection(row.projected_pts)
        if was_clamped:
            clamped += 1
            logger.warning(
                "Clamped projection %r for player %s to 0", row.projected_pts, row.player_id
            )

        players.append(PlayerProjection(
            player_id=row.player_id,
            position=position,
            projected_points=value,
            is_eliminated=row.team_id in eliminated,
            team_id=row.team_id,
            name=getattr(row, "name", None),
        ))

    if missing:
        logger.info("%d players have no projection and are excluded from the pool", missing)

    return ProjectionSnapshot(
        players=tuple(players),
        eliminated_team_ids=eliminated,
        clamped=clamped,
    )
