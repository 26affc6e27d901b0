"""
Pick submission and week status API routes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas import (
    PickSubmitRequest,
    PickResponse,
    WeekStatusResponse,
    MemberWeeksResponse,
    UsedPlayersResponse,
    WeekPicksResponse,
    ErrorResponse,
)
from ...core import settings
from ...core.positions import Position
from ...db import (
    get_db,
    LeagueRepository,
    WeekRepository,
    PickRepository,
    PlayerRepository,
    GameRepository,
    OddsCacheRepository,
)
from ...simulator import (
    Pick,
    PickLedger,
    PickError,
    AlreadySubmittedError,
    PlayerAlreadyUsedError,
    DeadlinePassedError,
    InvalidSlotError,
    get_week_status,
    current_open_week,
    calculate_pick_reveal_status,
    can_view_picks,
    filter_picks_by_reveal_status,
    first_kickoff_for_week,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leagues", tags=["picks"])

# HTTP status for each pick rule violation
PICK_ERROR_STATUS = {
    AlreadySubmittedError: status.HTTP_409_CONFLICT,
    PlayerAlreadyUsedError: status.HTTP_409_CONFLICT,
    DeadlinePassedError: status.HTTP_403_FORBIDDEN,
    InvalidSlotError: status.HTTP_400_BAD_REQUEST,
}


def _pick_response(pick: Pick) -> PickResponse:
    return PickResponse(
        member_id=pick.member_id,
        week=pick.week,
        slot=pick.slot,
        player_id=pick.player_id,
        submitted_at=pick.submitted_at
    )


async def _require_member(db: AsyncSession, league_id: str, member_id: str) -> None:
    if not await LeagueRepository(db).is_member(league_id, member_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Member {member_id} not found in league {league_id}"
        )


def _pick_error(error: PickError) -> HTTPException:
    return HTTPException(
        status_code=PICK_ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST),
        detail=str(error),
        headers={"X-Error-Code": error.code}
    )


async def submit_pick(
    db: AsyncSession,
    league_id: str,
    request: PickSubmitRequest,
    now: datetime,
    season: Optional[int] = None
) -> Pick:
    """
    Validate a pick against the member's ledger and store it.

    Args:
        db: Database session
        league_id: League identifier
        request: The pick being submitted
        now: Current time
        season: Season year (defaults to PICKEM_SEASON)

    Returns:
        The committed Pick

    Raises:
        HTTPException: 404 for unknown member/week/player, 400 for an unsupported position
        PickError: When a pick rule is violated
    """
    season = season or settings.SEASON
    await _require_member(db, league_id, request.member_id)

    week = await WeekRepository(db).get_week(season, request.week)
    if week is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Week {request.week} is not scheduled"
        )

    player = await PlayerRepository(db).get_player(season, request.player_id)
    if player is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player {request.player_id} not found"
        )

    try:
        position = Position(player.position)
    except ValueError:
        logger.warning("Player %s has unsupported position %r", player.player_id, player.position)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Player {request.player_id} has unsupported position {player.position}"
        )

    pick_repo = PickRepository(db)
    ledger = PickLedger(await pick_repo.list_for_member(league_id, season, request.member_id))
    pick = ledger.submit(
        request.member_id,
        week,
        request.slot,
        request.player_id,
        now,
        position=position
    )

    try:
        await pick_repo.add(league_id, season, pick)
        await OddsCacheRepository(db).invalidate(league_id, season)
        await db.commit()
    except IntegrityError:
        # A concurrent request committed a conflicting pick first
        await db.rollback()
        raise AlreadySubmittedError(request.member_id, request.week, request.slot)

    logger.info(
        "Member %s picked player %s at %s for week %d in league %s",
        request.member_id, request.player_id, request.slot.value, request.week, league_id
    )
    return pick


@router.post(
    "/{league_id}/picks",
    response_model=PickResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_pick(
    league_id: str,
    request: PickSubmitRequest,
    db: AsyncSession = Depends(get_db)
) -> PickResponse:
    """
    Submit a pick for one slot of one week.

    Picks are permanent. A player can be used only once per season.
    """
    try:
        pick = await submit_pick(db, league_id, request, now=datetime.now(timezone.utc))
    except PickError as e:
        raise _pick_error(e)
    return _pick_response(pick)


@router.get("/{league_id}/members/{member_id}/weeks", response_model=MemberWeeksResponse)
async def get_member_weeks(
    league_id: str,
    member_id: str,
    db: AsyncSession = Depends(get_db)
) -> MemberWeeksResponse:
    """
    Get the member's status for every playoff week and the week currently open.
    """
    await _require_member(db, league_id, member_id)

    now = datetime.now(timezone.utc)
    weeks = await WeekRepository(db).list_weeks(settings.SEASON)
    ledger = PickLedger(await PickRepository(db).list_for_member(league_id, settings.SEASON, member_id))

    open_week = current_open_week(weeks, now)
    return MemberWeeksResponse(
        member_id=member_id,
        current_open_week=open_week.index if open_week else None,
        weeks=[
            WeekStatusResponse(
                week=week.index,
                open_at=week.open_at,
                deadline_at=week.deadline_at,
                status=get_week_status(week, ledger.picks_for_week(member_id, week.index), now),
                filled_slots=sorted(ledger.filled_slots(member_id, week.index), key=lambda s: s.value),
            )
            for week in weeks
        ]
    )


@router.get("/{league_id}/members/{member_id}/used-players", response_model=UsedPlayersResponse)
async def get_used_players(
    league_id: str,
    member_id: str,
    db: AsyncSession = Depends(get_db)
) -> UsedPlayersResponse:
    """
    Get the players the member can no longer pick.
    """
    await _require_member(db, league_id, member_id)

    ledger = PickLedger(await PickRepository(db).list_for_member(league_id, settings.SEASON, member_id))
    return UsedPlayersResponse(
        member_id=member_id,
        player_ids=sorted(ledger.used_players(member_id))
    )


@router.get("/{league_id}/weeks/{week}/picks", response_model=WeekPicksResponse)
async def get_week_picks(
    league_id: str,
    week: int,
    viewer_id: str,
    db: AsyncSession = Depends(get_db)
) -> WeekPicksResponse:
    """
    Get the league's picks for a week as visible to `viewer_id`.

    Before the first kickoff only members who filled every slot are shown,
    and only to viewers who have done the same.
    """
    await _require_member(db, league_id, viewer_id)

    now = datetime.now(timezone.utc)
    picks = await PickRepository(db).list_for_league(league_id, settings.SEASON, [week])
    games = await GameRepository(db).list_games(settings.SEASON)
    first_kickoff = first_kickoff_for_week(games, week)

    reveal = calculate_pick_reveal_status(picks, viewer_id, first_kickoff, now)
    can_view = can_view_picks(reveal.current_member_submitted, reveal.past_deadline)

    if can_view:
        visible = filter_picks_by_reveal_status(picks, reveal.submitted_member_ids, reveal.past_deadline)
    else:
        visible = [p for p in picks if p.member_id == viewer_id]

    return WeekPicksResponse(
        week=week,
        viewer_submitted=reveal.current_member_submitted,
        past_deadline=reveal.past_deadline,
        can_view=can_view,
        submitted_member_ids=reveal.submitted_member_ids,
        picks=[_pick_response(p) for p in visible]
    )
