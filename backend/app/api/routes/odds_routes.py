"""
League odds API routes.
"""

import asyncio
import logging
import random
import threading
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas import OddsResponse, MemberOdds, ErrorResponse
from ...core import settings
from ...db import (
    get_db,
    LeagueRepository,
    PickRepository,
    GameRepository,
    StatRepository,
    ScoringSettingsRepository,
    OddsCacheRepository,
    DatabaseProjectionProvider,
)
from ...simulator import (
    MemberState,
    ProjectionProvider,
    aggregate_standings,
    determine_progress,
    simulate_win_probabilities,
    equalize_identical_states,
    apply_win_counts,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/odds", tags=["odds"])

MAX_LEAGUE_ID_LENGTH = 36


class LeagueNotFoundError(Exception):
    """Raised when a league has no members."""
    pass


class ScoringSettingsMissingError(Exception):
    """Raised when no active scoring table is configured."""
    pass


async def compute_league_odds(
    db: AsyncSession,
    league_id: str,
    now: datetime,
    season: Optional[int] = None,
    total_weeks: Optional[int] = None,
    n_simulations: Optional[int] = None,
    seed: Optional[int] = None,
    use_cache: bool = True,
    provider: Optional[ProjectionProvider] = None
) -> OddsResponse:
    """
    Calculate win probabilities for every member of a league.

    All data is loaded before the simulation starts; the trial loop runs in a
    worker thread and is cancelled at the next trial boundary if the request
    is abandoned.

    Args:
        db: Database session
        league_id: League identifier
        now: Current time
        season: Season year (defaults to PICKEM_SEASON)
        total_weeks: Number of playoff weeks (defaults to PICKEM_TOTAL_WEEKS)
        n_simulations: Number of Monte Carlo trials (defaults to ODDS_SIMULATIONS)
        seed: Fixed seed for reproducible odds (bypasses the cache)
        use_cache: Whether to read cached odds
        provider: Projection source (defaults to the database)

    Returns:
        OddsResponse ordered by descending win probability

    Raises:
        LeagueNotFoundError: If the league has no members
        ScoringSettingsMissingError: If no active scoring table exists
    """
    season = season or settings.SEASON
    total_weeks = total_weeks or settings.TOTAL_WEEKS
    n_simulations = n_simulations or settings.ODDS_SIMULATIONS

    members = await LeagueRepository(db).get_members(league_id)
    if not members:
        raise LeagueNotFoundError(f"League {league_id} not found")

    table = await ScoringSettingsRepository(db).get_active()
    if table is None:
        raise ScoringSettingsMissingError("No active scoring settings configured")

    games = await GameRepository(db).list_games(season)
    progress = determine_progress(games, total_weeks, now)

    cache_repo = OddsCacheRepository(db)
    if use_cache and seed is None:
        cached = await cache_repo.get(league_id, season, progress.current_week)
        if cached is not None:
            logger.debug("Serving cached odds for league %s week %d", league_id, progress.current_week)
            return OddsResponse(**cached, cached=True)

    # Until the current week kicks off, odds stay frozen at the end of the previous week
    counted_weeks = None
    if not progress.current_week_started:
        counted_weeks = set(range(1, progress.current_week))

    weeks = range(1, total_weeks + 1)
    picks = await PickRepository(db).list_for_league(league_id, season, weeks)
    stats = await StatRepository(db).stats_for_players(
        season, {p.player_id for p in picks}, weeks
    )
    standings = aggregate_standings(
        [m.id for m in members], picks, stats, table, counted_weeks
    )

    provider = provider or DatabaseProjectionProvider(db)
    snapshot = await provider.fetch_projections(season)
    logger.info(
        "Simulating league %s week %d with projection snapshot %s (%d players)",
        league_id, progress.current_week, snapshot.version, len(snapshot)
    )

    if progress.season_complete:
        weeks_remaining = 0
    else:
        weeks_remaining = max(0, total_weeks - progress.current_week + 1)

    states = [MemberState.from_standing(standings[m.id]) for m in members]
    cancel_event = threading.Event()
    try:
        run = await asyncio.to_thread(
            simulate_win_probabilities,
            states,
            snapshot,
            weeks_remaining,
            n_simulations,
            rng=random.Random(seed),
            variance_factor=settings.ODDS_VARIANCE_FACTOR,
            shards=settings.ODDS_SHARDS,
            cancel_event=cancel_event,
        )
    except asyncio.CancelledError:
        cancel_event.set()
        logger.info("Odds request for league %s abandoned; stopping simulation", league_id)
        raise

    apply_win_counts(run, equalize_identical_states(states, run.win_counts))

    odds = [
        MemberOdds(
            member_id=member.id,
            display_name=member.display_name,
            avatar_url=member.avatar_url,
            current_points=round(standings[member.id].current_points, 1),
            win_probability=run.results[member.id].win_probability,
            win_probability_display=run.results[member.id].display,
        )
        for member in members
    ]
    odds.sort(key=lambda o: o.win_probability, reverse=True)

    response = OddsResponse(
        league_id=league_id,
        season=season,
        current_week=progress.current_week,
        weeks_remaining=weeks_remaining,
        games_are_live=progress.games_are_live,
        simulations=n_simulations,
        eliminated_teams=sorted(snapshot.eliminated_team_ids),
        player_pool_size=len(snapshot),
        data_quality_issues=run.data_quality_issues,
        odds=odds,
    )

    if seed is None:
        await cache_repo.cleanup_expired()
        await cache_repo.set(
            league_id=league_id,
            season=season,
            week=progress.current_week,
            results=response.model_dump(mode="json", exclude={"cached", "cached_at"}),
            ttl_minutes=settings.ODDS_CACHE_TTL_MINUTES,
        )
        await db.commit()

    return response


@router.get(
    "",
    response_model=OddsResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_league_odds(
    league_id: Optional[str] = None,
    refresh: bool = False,
    seed: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
) -> OddsResponse:
    """
    Get each member's probability of finishing first in a league.

    Odds are cached for a few minutes; pass `refresh=true` to recompute, or a
    `seed` for reproducible results.
    """
    if league_id is None or not league_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="league_id required"
        )
    league_id = league_id.strip()
    if len(league_id) > MAX_LEAGUE_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"league_id must be at most {MAX_LEAGUE_ID_LENGTH} characters"
        )

    try:
        return await compute_league_odds(
            db,
            league_id,
            now=datetime.now(timezone.utc),
            seed=seed,
            use_cache=not refresh,
        )
    except LeagueNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="League not found"
        )
    except Exception as e:
        logger.exception("Failed to calculate odds for league %s", league_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to calculate odds: {e}"
        )
