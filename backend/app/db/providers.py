"""
Database-backed projection provider.

Reads the projection and game tables that the external sync jobs keep up to
date and hands the simulator a single consistent snapshot.
"""

from typing import Set

from sqlalchemy.ext.asyncio import AsyncSession

from ..simulator.projections import (
    ProjectionProvider,
    ProjectionSnapshot,
    ProjectionDataError,
    build_snapshot,
    eliminated_team_ids,
)
from .repositories import PlayerRepository, GameRepository


class DatabaseProjectionProvider(ProjectionProvider):
    """Projection provider over the playoff_players and playoff_games tables."""

    def __init__(self, session: AsyncSession):
        self.players = PlayerRepository(session)
        self.games = GameRepository(session)

    async def fetch_eliminated_teams(self, season: int) -> Set[int]:
        games = await self.games.list_games(season)
        return eliminated_team_ids(games)

    async def fetch_projections(self, season: int) -> ProjectionSnapshot:
        eliminated = await self.fetch_eliminated_teams(season)
        rows = await self.players.list_players(season)
        try:
            return build_snapshot(rows, eliminated)
        except (AttributeError, TypeError) as e:
            raise ProjectionDataError(f"Malformed projection data: {e}")
