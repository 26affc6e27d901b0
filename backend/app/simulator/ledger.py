"""
Append-only pick ledger.

Enforces the use-once rule: a player may appear at most once across all of a
member's picks for the season.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..core.positions import Position, Slot, is_eligible
from .models import Pick, Week, MemberId, PlayerId
from .week_window import WeekStatus, get_week_status, is_window_open


class PickLedger:
    """Record of committed picks for one league."""

    def __init__(self, picks: Iterable[Pick] = ()):
        self._picks: List[Pick] = []
        self._used: Dict[MemberId, Set[PlayerId]] = defaultdict(set)
        self._slots: Dict[Tuple[MemberId, int, Slot], Pick] = {}

        for pick in picks:
            self._record(pick)

    def _record(self, pick: Pick) -> None:
        key = (pick.member_id, pick.week, pick.slot)
        if key in self._slots:
            raise AlreadySubmittedError(pick.member_id, pick.week, pick.slot)
        if pick.player_id in self._used[pick.member_id]:
            raise PlayerAlreadyUsedError(pick.member_id, pick.player_id)

        self._picks.append(pick)
        self._slots[key] = pick
        self._used[pick.member_id].add(pick.player_id)

    def submit(
        self,
        member_id: MemberId,
        week: Week,
        slot: Slot,
        player_id: PlayerId,
        now: datetime,
        position: Optional[Position] = None
    ) -> Pick:
        """
        Commit a pick.

        Args:
            member_id: Member making the pick
            week: Week the pick is for
            slot: Slot being filled
            player_id: Player being picked
            now: Current time, used for the window check
            position: Player's position, checked against the slot when given

        Returns:
            The committed Pick

        Raises:
            AlreadySubmittedError: The slot already has a pick this week
            PlayerAlreadyUsedError: The player was picked in any week already
            DeadlinePassedError: The week's window is not open at `now`
            InvalidSlotError: The player's position can't fill the slot
        """
        slot = Slot(slot)

        if (member_id, week.index, slot) in self._slots:
            raise AlreadySubmittedError(member_id, week.index, slot)
        if player_id in self._used[member_id]:
            raise PlayerAlreadyUsedError(member_id, player_id)

        # Filled slots must not close the window for the member's remaining slots,
        # so the window is evaluated without their picks
        if not is_window_open(week, now):
            raise DeadlinePassedError(week, get_week_status(week, (), now))

        if position is not None and not is_eligible(position, slot):
            raise InvalidSlotError(Position(position), slot)

        pick = Pick(
            member_id=member_id,
            week=week.index,
            slot=slot,
            player_id=player_id,
            submitted_at=now,
        )
        self._record(pick)
        return pick

    def used_players(self, member_id: MemberId) -> FrozenSet[PlayerId]:
        """Players the member has already used in any week."""
        return frozenset(self._used.get(member_id, ()))

    def picks_for_week(self, member_id: MemberId, week: int) -> List[Pick]:
        return [p for p in self._picks if p.member_id == member_id and p.week == week]

    def picks_for_member(self, member_id: MemberId) -> List[Pick]:
        return [p for p in self._picks if p.member_id == member_id]

    def filled_slots(self, member_id: MemberId, week: int) -> FrozenSet[Slot]:
        return frozenset(p.slot for p in self.picks_for_week(member_id, week))

    def all_picks(self) -> List[Pick]:
        return list(self._picks)

    def __len__(self) -> int:
        return len(self._picks)


class PickError(Exception):
    """Base class for pick submission rule violations."""

    code = "pick_error"


class AlreadySubmittedError(PickError):
    """Raised when a member already filled a slot for a week."""

    code = "already_submitted"

    def __init__(self, member_id: MemberId, week: int, slot: Slot):
        self.member_id = member_id
        self.week = week
        self.slot = slot
        super().__init__(f"{slot.value} pick for week {week} has already been submitted")


class PlayerAlreadyUsedError(PickError):
    """Raised when a member picks a player they already used this season."""

    code = "player_already_used"

    def __init__(self, member_id: MemberId, player_id: PlayerId):
        self.member_id = member_id
        self.player_id = player_id
        super().__init__(f"Player {player_id} has already been used this season")


class DeadlinePassedError(PickError):
    """Raised when a pick is submitted outside the week's window."""

    code = "deadline_passed"

    def __init__(self, week: Week, status: WeekStatus):
        self.week = week
        self.status = status
        if status == WeekStatus.FUTURE_LOCKED:
            message = f"Picks for week {week.index} open at {week.open_at.isoformat()}"
        else:
            message = f"The deadline for week {week.index} passed at {week.deadline_at.isoformat()}"
        super().__init__(message)


class InvalidSlotError(PickError):
    """Raised when a player's position can't fill the requested slot."""

    code = "invalid_slot"

    def __init__(self, position: Position, slot: Slot):
        self.position = position
        self.slot = slot
        super().__init__(f"A {position.value} can't fill the {slot.value} slot")
