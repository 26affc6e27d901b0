"""
Repository classes for database operations.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    League,
    LeagueMember,
    PlayoffWeek,
    UserPick,
    PlayoffPlayer,
    PlayoffGame,
    PlayerWeekStat,
    ScoringSettings,
    OddsCache,
)
from ..core.positions import Slot
from ..simulator.models import Member, Week, Pick, StatLine
from ..simulator.projections import GameResult
from ..simulator.scoring import ScoringTable


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class LeagueRepository:
    """Repository for league and membership reads."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str, season: int, league_id: Optional[str] = None) -> League:
        """Create a league."""
        league = League(id=league_id or str(uuid4()), name=name, season=season)
        self.session.add(league)
        await self.session.flush()
        await self.session.refresh(league)
        return league

    async def add_member(
        self,
        league_id: str,
        user_id: str,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None
    ) -> LeagueMember:
        """Add a member to a league."""
        member = LeagueMember(
            league_id=league_id,
            user_id=user_id,
            display_name=display_name,
            avatar_url=avatar_url
        )
        self.session.add(member)
        await self.session.flush()
        return member

    async def get_members(self, league_id: str) -> List[Member]:
        """Get all members of a league in join order."""
        result = await self.session.execute(
            select(LeagueMember)
            .where(LeagueMember.league_id == league_id)
            .order_by(LeagueMember.id)
        )
        return [
            Member(
                id=row.user_id,
                display_name=row.display_name or "Unknown",
                avatar_url=row.avatar_url
            )
            for row in result.scalars().all()
        ]

    async def is_member(self, league_id: str, user_id: str) -> bool:
        """Check whether a user belongs to a league."""
        result = await self.session.execute(
            select(LeagueMember.id).where(
                LeagueMember.league_id == league_id,
                LeagueMember.user_id == user_id
            )
        )
        return result.scalar_one_or_none() is not None


class WeekRepository:
    """Repository for the playoff schedule."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_week(row: PlayoffWeek) -> Week:
        return Week(index=row.week_index, open_at=as_utc(row.open_at), deadline_at=as_utc(row.deadline_at))

    async def upsert(self, season: int, week_index: int, open_at: datetime, deadline_at: datetime) -> PlayoffWeek:
        """
        Create or correct a week's window.

        Schedule sync may move a window until it opens.
        """
        result = await self.session.execute(
            select(PlayoffWeek).where(
                PlayoffWeek.season == season,
                PlayoffWeek.week_index == week_index
            )
        )
        existing = result.scalar_one_or_none()

        if existing:
            existing.open_at = open_at
            existing.deadline_at = deadline_at
            await self.session.flush()
            return existing

        week = PlayoffWeek(season=season, week_index=week_index, open_at=open_at, deadline_at=deadline_at)
        self.session.add(week)
        await self.session.flush()
        return week

    async def list_weeks(self, season: int) -> List[Week]:
        """Get every week of a season in schedule order."""
        result = await self.session.execute(
            select(PlayoffWeek)
            .where(PlayoffWeek.season == season)
            .order_by(PlayoffWeek.week_index)
        )
        return [self._to_week(row) for row in result.scalars().all()]

    async def get_week(self, season: int, week_index: int) -> Optional[Week]:
        """Get one week of a season."""
        result = await self.session.execute(
            select(PlayoffWeek).where(
                PlayoffWeek.season == season,
                PlayoffWeek.week_index == week_index
            )
        )
        row = result.scalar_one_or_none()
        return self._to_week(row) if row else None


class PickRepository:
    """Repository for committed picks. There is no update or delete."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_pick(row: UserPick) -> Pick:
        return Pick(
            member_id=row.user_id,
            week=row.week,
            slot=Slot(row.position_slot),
            player_id=row.player_id,
            submitted_at=as_utc(row.submitted_at)
        )

    async def add(self, league_id: str, season: int, pick: Pick) -> UserPick:
        """Persist a pick accepted by the ledger."""
        row = UserPick(
            league_id=league_id,
            user_id=pick.member_id,
            season=season,
            week=pick.week,
            position_slot=pick.slot.value,
            player_id=pick.player_id,
            submitted_at=pick.submitted_at
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_for_league(
        self,
        league_id: str,
        season: int,
        weeks: Optional[Iterable[int]] = None
    ) -> List[Pick]:
        """Get all picks in a league for a season, optionally limited to some weeks."""
        conditions = [
            UserPick.league_id == league_id,
            UserPick.season == season
        ]
        if weeks is not None:
            conditions.append(UserPick.week.in_(list(weeks)))

        result = await self.session.execute(
            select(UserPick).where(*conditions).order_by(UserPick.id)
        )
        return [self._to_pick(row) for row in result.scalars().all()]

    async def list_for_member(self, league_id: str, season: int, user_id: str) -> List[Pick]:
        """Get a member's picks for a season."""
        result = await self.session.execute(
            select(UserPick)
            .where(
                UserPick.league_id == league_id,
                UserPick.season == season,
                UserPick.user_id == user_id
            )
            .order_by(UserPick.id)
        )
        return [self._to_pick(row) for row in result.scalars().all()]


class PlayerRepository:
    """Repository for rosterable players and their projections."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(
        self,
        season: int,
        player_id: int,
        name: str,
        position: str,
        team_id: Optional[int] = None,
        projected_pts: Optional[float] = None,
        projection_source: Optional[str] = None
    ) -> PlayoffPlayer:
        """Create or refresh a player's projection."""
        existing = await self.get_player(season, player_id)

        if existing:
            existing.name = name
            existing.position = position
            existing.team_id = team_id
            existing.projected_pts = projected_pts
            existing.projection_source = projection_source
            existing.projection_updated_at = datetime.now(timezone.utc)
            await self.session.flush()
            return existing

        player = PlayoffPlayer(
            season=season,
            player_id=player_id,
            name=name,
            position=position,
            team_id=team_id,
            projected_pts=projected_pts,
            projection_source=projection_source,
            projection_updated_at=datetime.now(timezone.utc)
        )
        self.session.add(player)
        await self.session.flush()
        return player

    async def get_player(self, season: int, player_id: int) -> Optional[PlayoffPlayer]:
        """Get a player by external ID."""
        result = await self.session.execute(
            select(PlayoffPlayer).where(
                PlayoffPlayer.season == season,
                PlayoffPlayer.player_id == player_id
            )
        )
        return result.scalar_one_or_none()

    async def list_players(self, season: int) -> List[PlayoffPlayer]:
        """Get every player for a season."""
        result = await self.session.execute(
            select(PlayoffPlayer)
            .where(PlayoffPlayer.season == season)
            .order_by(PlayoffPlayer.player_id)
        )
        return list(result.scalars().all())


class GameRepository:
    """Repository for playoff games."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(
        self,
        season: int,
        week_index: int,
        home_team_id: int,
        away_team_id: int,
        kickoff_at: Optional[datetime] = None,
        home_score: Optional[int] = None,
        away_score: Optional[int] = None,
        status_short: Optional[str] = None
    ) -> PlayoffGame:
        """Add a game to the schedule."""
        game = PlayoffGame(
            season=season,
            week_index=week_index,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            kickoff_at=kickoff_at,
            home_score=home_score,
            away_score=away_score,
            status_short=status_short
        )
        self.session.add(game)
        await self.session.flush()
        return game

    async def list_games(self, season: int) -> List[GameResult]:
        """Get every game of a season ordered by week and kickoff."""
        result = await self.session.execute(
            select(PlayoffGame)
            .where(PlayoffGame.season == season)
            .order_by(PlayoffGame.week_index, PlayoffGame.kickoff_at)
        )
        return [
            GameResult(
                week=row.week_index,
                home_team_id=row.home_team_id,
                away_team_id=row.away_team_id,
                home_score=row.home_score,
                away_score=row.away_score,
                status=row.status_short,
                kickoff_at=as_utc(row.kickoff_at)
            )
            for row in result.scalars().all()
        ]


class StatRepository:
    """Repository for realized player stat lines."""

    STAT_FIELDS = (
        "pass_yards", "pass_tds", "rush_yards", "rush_tds", "rec_yards",
        "rec_tds", "interceptions", "fumbles_lost", "two_pt_conversions"
    )

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, season: int, week: int, player_id: int, **stats) -> PlayerWeekStat:
        """Create or replace a player's stat line for a week."""
        result = await self.session.execute(
            select(PlayerWeekStat).where(
                PlayerWeekStat.season == season,
                PlayerWeekStat.week == week,
                PlayerWeekStat.player_id == player_id
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = PlayerWeekStat(season=season, week=week, player_id=player_id)
            self.session.add(row)

        for name in self.STAT_FIELDS:
            setattr(row, name, stats.get(name) or 0)

        await self.session.flush()
        return row

    async def stats_for_players(
        self,
        season: int,
        player_ids: Iterable[int],
        weeks: Iterable[int]
    ) -> Dict[Tuple[int, int], StatLine]:
        """
        Get realized stat lines.

        Returns:
            Dict mapping (player_id, week) -> StatLine
        """
        player_ids = list(player_ids)
        if not player_ids:
            return {}

        result = await self.session.execute(
            select(PlayerWeekStat).where(
                PlayerWeekStat.season == season,
                PlayerWeekStat.week.in_(list(weeks)),
                PlayerWeekStat.player_id.in_(player_ids)
            )
        )
        return {
            (row.player_id, row.week): StatLine(**{
                name: getattr(row, name) or 0 for name in self.STAT_FIELDS
            })
            for row in result.scalars().all()
        }


class ScoringSettingsRepository:
    """Repository for the scoring table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **values) -> ScoringSettings:
        """Store a scoring table, active by default."""
        settings = ScoringSettings(**values)
        self.session.add(settings)
        await self.session.flush()
        return settings

    async def get_active(self) -> Optional[ScoringTable]:
        """Get the active scoring table, or None when none is configured."""
        result = await self.session.execute(
            select(ScoringSettings)
            .where(ScoringSettings.is_active.is_(True))
            .order_by(ScoringSettings.id.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return ScoringTable.from_mapping({
            column.name: getattr(row, column.name)
            for column in ScoringSettings.__table__.columns
        })


class OddsCacheRepository:
    """Repository for odds cache operations."""

    DEFAULT_TTL_MINUTES = 5

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, league_id: str, season: int, week: int) -> Optional[dict]:
        """
        Get cached odds if not expired.

        Returns:
            Parsed results dict (with `cached_at`) or None if not cached/expired
        """
        result = await self.session.execute(
            select(OddsCache).where(
                OddsCache.league_id == league_id,
                OddsCache.season == season,
                OddsCache.week == week
            )
        )
        cache_entry = result.scalar_one_or_none()

        if cache_entry is None:
            return None

        if cache_entry.is_expired():
            await self.session.delete(cache_entry)
            return None

        results = json.loads(cache_entry.results_json)
        results["cached_at"] = as_utc(cache_entry.created_at).isoformat()
        return results

    async def set(
        self,
        league_id: str,
        season: int,
        week: int,
        results: dict,
        ttl_minutes: int = DEFAULT_TTL_MINUTES
    ) -> OddsCache:
        """
        Cache odds for a league.

        Args:
            league_id: League identifier
            season: Season year
            week: Current playoff week
            results: Results to cache
            ttl_minutes: Time-to-live in minutes

        Returns:
            Created cache entry
        """
        # Delete existing entry if present
        await self.session.execute(
            delete(OddsCache).where(
                OddsCache.league_id == league_id,
                OddsCache.season == season,
                OddsCache.week == week
            )
        )

        expires_at = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
        cache_entry = OddsCache(
            league_id=league_id,
            season=season,
            week=week,
            results_json=json.dumps(results),
            expires_at=expires_at
        )
        self.session.add(cache_entry)
        await self.session.flush()
        return cache_entry

    async def invalidate(self, league_id: str, season: int) -> int:
        """
        Invalidate every cached week for a league.

        Returns:
            Number of entries deleted
        """
        result = await self.session.execute(
            delete(OddsCache).where(
                OddsCache.league_id == league_id,
                OddsCache.season == season
            )
        )
        return result.rowcount

    async def cleanup_expired(self) -> int:
        """
        Remove all expired cache entries.

        Returns:
            Number of entries deleted
        """
        result = await self.session.execute(
            delete(OddsCache)
            .where(OddsCache.expires_at < datetime.now(timezone.utc))
        )
        return result.rowcount
