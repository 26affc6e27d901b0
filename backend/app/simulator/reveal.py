"""
Pick reveal rules.

A member may see other members' picks for a week once they have filled every
slot themselves, or once the deadline (first kickoff) has passed. Before the
deadline only picks from members with complete submissions are shown.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from ..core.positions import SLOT_ORDER, Slot
from .models import Pick, MemberId


@dataclass
class PickRevealResult:
    current_member_submitted: bool
    past_deadline: bool
    submitted_member_ids: List[MemberId]


def has_complete_submission(slots: Set[Slot]) -> bool:
    return all(slot in slots for slot in SLOT_ORDER)


def group_slots_by_member(picks: Iterable[Pick]) -> Dict[MemberId, Set[Slot]]:
    member_slots: Dict[MemberId, Set[Slot]] = {}
    for pick in picks:
        member_slots.setdefault(pick.member_id, set()).add(pick.slot)
    return member_slots


def submitted_member_ids(member_slots: Dict[MemberId, Set[Slot]]) -> List[MemberId]:
    return [mid for mid, slots in member_slots.items() if has_complete_submission(slots)]


def is_past_deadline(now: datetime, first_kickoff: Optional[datetime]) -> bool:
    if first_kickoff is None:
        return False
    return now >= first_kickoff


def can_view_picks(current_member_submitted: bool, past_deadline: bool) -> bool:
    return current_member_submitted or past_deadline


def filter_picks_by_reveal_status(
    picks: Iterable[Pick],
    submitted_ids: Iterable[MemberId],
    past_deadline: bool
) -> List[Pick]:
    """Drop picks that aren't visible yet."""
    if past_deadline:
        return list(picks)
    visible = set(submitted_ids)
    return [p for p in picks if p.member_id in visible]


def calculate_pick_reveal_status(
    picks: Iterable[Pick],
    current_member_id: MemberId,
    first_kickoff: Optional[datetime],
    now: datetime
) -> PickRevealResult:
    member_slots = group_slots_by_member(picks)
    return PickRevealResult(
        current_member_submitted=has_complete_submission(member_slots.get(current_member_id, set())),
        past_deadline=is_past_deadline(now, first_kickoff),
        submitted_member_ids=submitted_member_ids(member_slots),
    )
