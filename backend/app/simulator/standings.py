"""
Standings aggregation.

Sums realized fantasy points per member. Picks whose stats have not come in
yet are kept as pending picks; the simulator projects them.
"""

import math
from typing import Collection, Dict, Iterable, Mapping, Optional, Tuple

from .models import MemberStanding, Pick, StatLine, MemberId, PlayerId
from .scoring import ScoringTable, DEFAULT_SCORING, points


StatsByPlayerWeek = Mapping[Tuple[PlayerId, int], StatLine]


def aggregate_standings(
    member_ids: Iterable[MemberId],
    picks: Iterable[Pick],
    stats: StatsByPlayerWeek,
    table: ScoringTable = DEFAULT_SCORING,
    counted_weeks: Optional[Collection[int]] = None
) -> Dict[MemberId, MemberStanding]:
    """
    Build each member's standing from picks and realized stats.

    Args:
        member_ids: League members, in display order
        picks: Committed picks for the league
        stats: Realized stat lines keyed by (player_id, week)
        table: Scoring table to apply
        counted_weeks: When given, picks for other weeks are ignored entirely

    Returns:
        Dict mapping member_id -> MemberStanding
    """
    scored: Dict[MemberId, list] = {}
    used: Dict[MemberId, set] = {}
    pending: Dict[MemberId, list] = {}
    for mid in member_ids:
        scored[mid] = []
        used[mid] = set()
        pending[mid] = []

    for pick in picks:
        if pick.member_id not in scored:
            continue
        if counted_weeks is not None and pick.week not in counted_weeks:
            continue

        used[pick.member_id].add(pick.player_id)
        line = stats.get((pick.player_id, pick.week))
        if line is None:
            pending[pick.member_id].append((pick.week, pick.player_id))
        else:
            scored[pick.member_id].append(points(line, table))

    return {
        mid: MemberStanding(
            member_id=mid,
            current_points=math.fsum(scored[mid]),
            used_player_ids=frozenset(used[mid]),
            pending_picks=tuple(sorted(pending[mid])),
        )
        for mid in scored
    }


def current_totals(
    member_ids: Iterable[MemberId],
    picks: Iterable[Pick],
    stats: StatsByPlayerWeek,
    table: ScoringTable = DEFAULT_SCORING
) -> Dict[MemberId, float]:
    """Realized points per member."""
    standings = aggregate_standings(member_ids, picks, stats, table)
    return {mid: s.current_points for mid, s in standings.items()}
