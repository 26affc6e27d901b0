"""
SQLAlchemy database models.
"""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Integer, Float, Boolean, DateTime, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class League(Base):
    """A group of members playing the pick game together."""

    __tablename__ = "leagues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    members: Mapped[list["LeagueMember"]] = relationship(
        back_populates="league",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<League(id={self.id}, name={self.name}, season={self.season})>"


class LeagueMember(Base):
    """A user's membership in a league, with the display attributes used on the odds board."""

    __tablename__ = "league_members"

    id: Mapped[int] = mapped_column(primary_key=True)
    league_id: Mapped[str] = mapped_column(ForeignKey("leagues.id"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    league: Mapped["League"] = relationship(back_populates="members")

    __table_args__ = (
        UniqueConstraint("league_id", "user_id", name="uq_league_members_league_user"),
    )

    def __repr__(self) -> str:
        return f"<LeagueMember(league_id={self.league_id}, user_id={self.user_id})>"


class PlayoffWeek(Base):
    """A scheduled playoff week and its pick window."""

    __tablename__ = "playoff_weeks"

    id: Mapped[int] = mapped_column(primary_key=True)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    week_index: Mapped[int] = mapped_column(Integer, nullable=False)
    open_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    deadline_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("season", "week_index", name="uq_playoff_weeks_season_week"),
    )

    def __repr__(self) -> str:
        return f"<PlayoffWeek(season={self.season}, week_index={self.week_index})>"


class UserPick(Base):
    """A committed pick. Rows are inserted once and never updated."""

    __tablename__ = "user_picks"

    id: Mapped[int] = mapped_column(primary_key=True)
    league_id: Mapped[str] = mapped_column(ForeignKey("leagues.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    position_slot: Mapped[str] = mapped_column(String(10), nullable=False)
    player_id: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        # One pick per slot per week, and each player at most once per season
        UniqueConstraint("league_id", "user_id", "season", "week", "position_slot", name="uq_user_picks_slot"),
        UniqueConstraint("league_id", "user_id", "season", "player_id", name="uq_user_picks_player"),
        Index("ix_user_picks_league_season", "league_id", "season"),
    )

    def __repr__(self) -> str:
        return f"<UserPick(user_id={self.user_id}, week={self.week}, slot={self.position_slot}, player_id={self.player_id})>"


class PlayoffPlayer(Base):
    """A rosterable player and his current projection."""

    __tablename__ = "playoff_players"

    id: Mapped[int] = mapped_column(primary_key=True)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    player_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(10), nullable=False)
    team_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    projected_pts: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    projection_source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    projection_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("season", "player_id", name="uq_playoff_players_season_player"),
    )

    def __repr__(self) -> str:
        return f"<PlayoffPlayer(player_id={self.player_id}, name={self.name}, position={self.position})>"


class PlayoffGame(Base):
    """A playoff game, used for week progress and team elimination."""

    __tablename__ = "playoff_games"

    id: Mapped[int] = mapped_column(primary_key=True)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    week_index: Mapped[int] = mapped_column(Integer, nullable=False)
    home_team_id: Mapped[int] = mapped_column(Integer, nullable=False)
    away_team_id: Mapped[int] = mapped_column(Integer, nullable=False)
    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status_short: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    kickoff_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_playoff_games_season_week", "season", "week_index"),
    )

    def __repr__(self) -> str:
        return f"<PlayoffGame(week={self.week_index}, home={self.home_team_id}, away={self.away_team_id})>"


class PlayerWeekStat(Base):
    """A player's realized stat line for one playoff week."""

    __tablename__ = "player_week_stats"

    id: Mapped[int] = mapped_column(primary_key=True)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    player_id: Mapped[int] = mapped_column(Integer, nullable=False)
    pass_yards: Mapped[float] = mapped_column(Float, default=0)
    pass_tds: Mapped[int] = mapped_column(Integer, default=0)
    rush_yards: Mapped[float] = mapped_column(Float, default=0)
    rush_tds: Mapped[int] = mapped_column(Integer, default=0)
    rec_yards: Mapped[float] = mapped_column(Float, default=0)
    rec_tds: Mapped[int] = mapped_column(Integer, default=0)
    interceptions: Mapped[int] = mapped_column(Integer, default=0)
    fumbles_lost: Mapped[int] = mapped_column(Integer, default=0)
    two_pt_conversions: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("season", "week", "player_id", name="uq_player_week_stats"),
    )

    def __repr__(self) -> str:
        return f"<PlayerWeekStat(player_id={self.player_id}, week={self.week})>"


class ScoringSettings(Base):
    """Scoring table. Exactly one row is expected to be active."""

    __tablename__ = "scoring_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    pass_yds_per_point: Mapped[float] = mapped_column(Float, default=25)
    rush_yds_per_point: Mapped[float] = mapped_column(Float, default=10)
    rec_yds_per_point: Mapped[float] = mapped_column(Float, default=10)
    pass_td_points: Mapped[float] = mapped_column(Float, default=5)
    rush_td_points: Mapped[float] = mapped_column(Float, default=6)
    rec_td_points: Mapped[float] = mapped_column(Float, default=6)
    interception_points: Mapped[float] = mapped_column(Float, default=-2)
    fumble_lost_points: Mapped[float] = mapped_column(Float, default=-2)
    two_pt_conversion_points: Mapped[float] = mapped_column(Float, default=2)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<ScoringSettings(id={self.id}, is_active={self.is_active})>"


class OddsCache(Base):
    """Cache for league odds with TTL."""

    __tablename__ = "odds_cache"

    id: Mapped[int] = mapped_column(primary_key=True)
    league_id: Mapped[str] = mapped_column(String(36), nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    results_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_odds_cache_lookup", "league_id", "season", "week"),
    )

    def __repr__(self) -> str:
        return f"<OddsCache(league_id={self.league_id}, season={self.season}, week={self.week})>"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the cache entry has expired."""
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now > expires_at
