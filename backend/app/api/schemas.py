"""
Pydantic schemas for API request/response validation.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from ..core.positions import Slot
from ..simulator.week_window import WeekStatus


# ============== Odds Schemas ==============

class MemberOdds(BaseModel):
    """Win odds for a single league member."""
    member_id: str
    display_name: str
    avatar_url: Optional[str] = None
    current_points: float
    win_probability: float
    win_probability_display: str


class OddsResponse(BaseModel):
    """League win probabilities."""
    league_id: str
    season: int
    current_week: int
    weeks_remaining: int
    games_are_live: bool
    simulations: int
    eliminated_teams: List[int]
    player_pool_size: int
    data_quality_issues: int = 0
    odds: List[MemberOdds]
    cached: bool = False
    cached_at: Optional[datetime] = None


# ============== Pick Schemas ==============

class PickSubmitRequest(BaseModel):
    """Submit a pick for one slot."""
    member_id: str = Field(..., min_length=1, max_length=36)
    week: int = Field(..., ge=1)
    slot: Slot
    player_id: int


class PickResponse(BaseModel):
    """A committed pick."""
    member_id: str
    week: int
    slot: Slot
    player_id: int
    submitted_at: datetime


class WeekStatusResponse(BaseModel):
    """A member's status for one week."""
    week: int
    open_at: datetime
    deadline_at: datetime
    status: WeekStatus
    filled_slots: List[Slot]


class MemberWeeksResponse(BaseModel):
    """Every week's status for a member."""
    member_id: str
    current_open_week: Optional[int] = None
    weeks: List[WeekStatusResponse]


class UsedPlayersResponse(BaseModel):
    """Players a member has already used."""
    member_id: str
    player_ids: List[int]


class WeekPicksResponse(BaseModel):
    """Picks for a week that the viewer is allowed to see."""
    week: int
    viewer_submitted: bool
    past_deadline: bool
    can_view: bool
    submitted_member_ids: List[str]
    picks: List[PickResponse]


# ============== Error Schemas ==============

class ErrorResponse(BaseModel):
    """API error response."""
    detail: str
    code: Optional[str] = None
