"""
Monte Carlo simulation engine for league win probabilities.

Each trial plays out every remaining week for every member: members greedily
take the best projected eligible player per slot, each pick scores a draw
from a normal distribution around its projection, and the member with the
highest final total wins the trial.
"""

import logging
import random
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..core.positions import Position, Slot, SLOT_ORDER, SLOT_POSITIONS
from .models import MemberState, PlayerProjection, SimulationResult, SimulationRun, MemberId, PlayerId
from .projections import ProjectionSnapshot, sanitize_projection


logger = logging.getLogger(__name__)

N_SIMULATIONS = 10000
VARIANCE_FACTOR = 0.35

# Below this a probability is shown as "<0.1%"
DISPLAY_FLOOR = 0.001

PROGRESS_INTERVAL = 100

RankedPool = Dict[Slot, List[PlayerProjection]]


class SimulationCancelledError(Exception):
    """Raised when a run is abandoned before all trials completed."""
    pass


def format_probability(probability: float) -> str:
    """Render a win probability for display."""
    if probability < DISPLAY_FLOOR:
        return "<0.1%"
    pct = Decimal(repr(probability * 100)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{pct}%"


def rank_pool(
    players: Iterable[PlayerProjection]
) -> Tuple[RankedPool, Dict[PlayerId, PlayerProjection], int]:
    """
    Prepare the player pool for the trial loop.

    Eliminated players are dropped from the ranked lists. Unusable projections
    are clamped to zero.

    Returns:
        Tuple of (players per slot sorted by projection, lookup by id,
        number of clamped projections)
    """
    clamped = 0
    lookup: Dict[PlayerId, PlayerProjection] = {}

    for player in players:
        value, was_clamped = sanitize_projection(player.projected_points)
        if was_clamped:
            clamped += 1
            logger.warning(
                "Clamped projection %r for player %s to 0", player.projected_points, player.player_id
            )
            player = PlayerProjection(
                player_id=player.player_id,
                position=player.position,
                projected_points=value,
                is_eliminated=player.is_eliminated,
                team_id=player.team_id,
                name=player.name,
            )
        lookup[player.player_id] = player

    ranked: RankedPool = {}
    for slot in SLOT_ORDER:
        eligible = [
            p for p in lookup.values()
            if not p.is_eliminated and Position(p.position) in SLOT_POSITIONS[slot]
        ]
        # sorted() is stable, so equal projections keep pool order
        ranked[slot] = sorted(eligible, key=lambda p: p.projected_points, reverse=True)

    return ranked, lookup, clamped


def draw_points(rng: random.Random, projected: float, variance_factor: float = VARIANCE_FACTOR) -> float:
    """Draw a simulated score for one player, floored at zero."""
    return max(0.0, rng.gauss(projected, projected * variance_factor))


def _best_available(candidates: List[PlayerProjection], used: Set[PlayerId]) -> Optional[PlayerProjection]:
    for player in candidates:
        if player.player_id not in used:
            return player
    return None


def simulate_member_future(
    rng: random.Random,
    member: MemberState,
    ranked: RankedPool,
    lookup: Dict[PlayerId, PlayerProjection],
    weeks_remaining: int,
    variance_factor: float = VARIANCE_FACTOR
) -> float:
    """
    Simulate one member's points for the rest of the season in one trial.

    Pending picks (submitted, not yet scored) are drawn first, then the
    member's unpicked weeks are filled greedily.

    Returns:
        Simulated future points (excluding current points)
    """
    total = 0.0
    used = set(member.used_player_ids)

    for player_id in member.pending_player_ids:
        player = lookup.get(player_id)
        if player is not None:
            total += draw_points(rng, player.projected_points, variance_factor)

    weeks_to_simulate = max(0, weeks_remaining - member.pending_weeks)
    for _ in range(weeks_to_simulate):
        for slot in SLOT_ORDER:
            player = _best_available(ranked[slot], used)
            if player is None:
                continue
            total += draw_points(rng, player.projected_points, variance_factor)
            used.add(player.player_id)

    return total


def _pick_winner(totals: List[float], tie_rng: random.Random) -> int:
    best = max(totals)
    leaders = [i for i, total in enumerate(totals) if total == best]
    if len(leaders) == 1:
        return leaders[0]
    return leaders[tie_rng.randrange(len(leaders))]


def _run_trials(
    members: Sequence[MemberState],
    ranked: RankedPool,
    lookup: Dict[PlayerId, PlayerProjection],
    weeks_remaining: int,
    n_trials: int,
    rng: random.Random,
    variance_factor: float,
    cancel_event: Optional[threading.Event] = None,
    on_progress: Optional[Callable[[int], None]] = None
) -> List[int]:
    """Run `n_trials` trials and return win counts indexed like `members`."""
    # Tie-breaks use their own stream so resolving a tie never shifts the score draws
    tie_rng = random.Random(rng.getrandbits(64))
    wins = [0] * len(members)

    for trial in range(n_trials):
        if cancel_event is not None and cancel_event.is_set():
            raise SimulationCancelledError(f"Cancelled after {trial} of {n_trials} trials")

        if on_progress and trial % PROGRESS_INTERVAL == 0:
            on_progress(trial)

        totals = [
            member.current_points + simulate_member_future(
                rng, member, ranked, lookup, weeks_remaining, variance_factor
            )
            for member in members
        ]
        wins[_pick_winner(totals, tie_rng)] += 1

    if on_progress:
        on_progress(n_trials)

    return wins


def _split_trials(n_simulations: int, shards: int) -> List[int]:
    base, extra = divmod(n_simulations, shards)
    return [base + (1 if i < extra else 0) for i in range(shards)]


def simulate_win_probabilities(
    members: Sequence[MemberState],
    pool: Union[ProjectionSnapshot, Iterable[PlayerProjection]],
    weeks_remaining: int,
    n_simulations: int = N_SIMULATIONS,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    variance_factor: float = VARIANCE_FACTOR,
    shards: int = 1,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable[[float], None]] = None
) -> SimulationRun:
    """
    Run Monte Carlo simulation of the remaining weeks.

    Args:
        members: Member states in display order
        pool: Projection snapshot (or plain projections) for every player
        weeks_remaining: Weeks left to play, including the current one
        n_simulations: Number of trials
        rng: Random generator owned by this run
        seed: Seed for a fresh generator when `rng` is not given
        variance_factor: Standard deviation as a fraction of the projection
        shards: Number of threads to split trials across
        cancel_event: Checked between trials; when set the run is abandoned
        progress_callback: Optional callback for progress updates (receives percent complete)

    Returns:
        SimulationRun with one SimulationResult per member

    Raises:
        SimulationCancelledError: If `cancel_event` was set before the run finished
    """
    if n_simulations < 1:
        raise ValueError("n_simulations must be at least 1")
    if weeks_remaining < 0:
        raise ValueError("weeks_remaining can't be negative")
    if shards < 1:
        raise ValueError("shards must be at least 1")

    if rng is None:
        rng = random.Random(seed)

    snapshot_clamped = 0
    if isinstance(pool, ProjectionSnapshot):
        snapshot_clamped = pool.clamped
        players = pool.players
    else:
        players = tuple(pool)

    ranked, lookup, clamped = rank_pool(players)
    data_quality_issues = snapshot_clamped + clamped
    if data_quality_issues:
        logger.warning("Simulating with %d clamped projections", data_quality_issues)

    members = list(members)
    run = SimulationRun(
        n_simulations=n_simulations,
        weeks_remaining=weeks_remaining,
        player_pool_size=len(lookup),
        data_quality_issues=data_quality_issues,
    )
    if not members:
        return run

    if shards == 1:
        def report(done: int) -> None:
            if progress_callback:
                progress_callback(done / n_simulations * 100)

        wins = _run_trials(
            members, ranked, lookup, weeks_remaining, n_simulations,
            rng, variance_factor, cancel_event, report
        )
    else:
        wins = _run_sharded(
            members, ranked, lookup, weeks_remaining, n_simulations,
            rng, variance_factor, shards, cancel_event, progress_callback
        )

    for member, member_wins in zip(members, wins):
        probability = member_wins / n_simulations
        run.results[member.member_id] = SimulationResult(
            member_id=member.member_id,
            current_points=member.current_points,
            wins=member_wins,
            win_probability=probability,
            display=format_probability(probability),
        )

    logger.debug(
        "Simulated %d trials for %d members over %d weeks",
        n_simulations, len(members), weeks_remaining
    )
    return run


def _run_sharded(
    members: Sequence[MemberState],
    ranked: RankedPool,
    lookup: Dict[PlayerId, PlayerProjection],
    weeks_remaining: int,
    n_simulations: int,
    rng: random.Random,
    variance_factor: float,
    shards: int,
    cancel_event: Optional[threading.Event],
    progress_callback: Optional[Callable[[float], None]]
) -> List[int]:
    """Split trials across threads, one generator per shard, and merge the counters."""
    shard_trials = _split_trials(n_simulations, shards)
    shard_seeds = [rng.getrandbits(64) for _ in range(shards)]
    done = [0] * shards
    lock = threading.Lock()

    def make_reporter(index: int) -> Callable[[int], None]:
        def report(completed: int) -> None:
            with lock:
                done[index] = completed
                total_done = sum(done)
            if progress_callback:
                progress_callback(total_done / n_simulations * 100)
        return report

    with ThreadPoolExecutor(max_workers=shards) as executor:
        futures = [
            executor.submit(
                _run_trials, members, ranked, lookup, weeks_remaining, trials,
                random.Random(shard_seed), variance_factor, cancel_event, make_reporter(i)
            )
            for i, (trials, shard_seed) in enumerate(zip(shard_trials, shard_seeds))
        ]
        shard_wins = [future.result() for future in futures]

    return [sum(counts) for counts in zip(*shard_wins)]


def equalize_identical_states(
    members: Sequence[MemberState],
    wins: Dict[MemberId, float]
) -> Dict[MemberId, float]:
    """
    Average win counts across members in indistinguishable positions.

    Members with the same points, used players and pending picks face the
    same future, so they get the same odds.
    """
    groups: Dict[tuple, List[MemberId]] = {}
    for member in members:
        key = (
            round(member.current_points, 1),
            tuple(sorted(member.used_player_ids)),
            tuple(sorted(member.pending_player_ids)),
            member.pending_weeks,
        )
        groups.setdefault(key, []).append(member.member_id)

    equalized = dict(wins)
    for member_ids in groups.values():
        if len(member_ids) > 1:
            average = sum(wins.get(mid, 0) for mid in member_ids) / len(member_ids)
            for mid in member_ids:
                equalized[mid] = average
    return equalized


def apply_win_counts(run: SimulationRun, wins: Dict[MemberId, float]) -> SimulationRun:
    """Replace a run's win counts and recompute probabilities and display strings."""
    for member_id, result in run.results.items():
        result.wins = wins.get(member_id, 0)
        result.win_probability = result.wins / run.n_simulations
        result.display = format_probability(result.win_probability)
    return run
