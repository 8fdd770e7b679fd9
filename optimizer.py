# optimizer.py
"""
Smart matchmaking: choosing the next four players and their teams.

The search is a brute-force enumeration: every combination of four available
players, times the three ways of splitting four players into two pairs. Each
split is scored by ``match_scorer.score_match``; fairness-vetoed splits are
discarded. Pools in this domain are small (typically under 20 players), which
keeps the enumeration cheap.

The candidate generator is kept separate from scoring so the search strategy
can change without touching the scorer.
"""

import logging
import random
from collections.abc import Iterator, Sequence
from itertools import combinations

from app_types import (
    DoublesMatch,
    MatchCandidate,
    MatchMethod,
    MatchmakingConfig,
    MatchRecord,
    Player,
    PlayerPair,
    RoundResult,
    ScoreBreakdown,
)
from constants import DEFAULT_NUM_COURTS, PLAYERS_PER_COURT
from exceptions import ValidationError
from logger import log_candidate_debug
from match_history import HistoryIndex, player_match_count
from match_scorer import score_match

logger = logging.getLogger("app.optimizer")

# Two teams of two players
TeamSplit = tuple[tuple[Player, Player], tuple[Player, Player]]


def team_splits(group: Sequence[Player]) -> list[TeamSplit]:
    """All three ways to divide four players into two unordered teams of two."""
    p1, p2, p3, p4 = group
    return [
        ((p1, p2), (p3, p4)),
        ((p1, p3), (p2, p4)),
        ((p1, p4), (p2, p3)),
    ]


def enumerate_candidates(
    pool: Sequence[Player],
) -> Iterator[tuple[tuple[Player, ...], tuple[Player, Player], tuple[Player, Player]]]:
    """Yields (group, team_1, team_2) for every 4-player group and team split."""
    for group in combinations(pool, PLAYERS_PER_COURT):
        for team_1, team_2 in team_splits(group):
            yield group, team_1, team_2


def _names(team: Sequence[Player]) -> PlayerPair:
    return tuple(p.name for p in team)


def _build_candidate(
    group: Sequence[Player],
    team_1: Sequence[Player],
    team_2: Sequence[Player],
    score: ScoreBreakdown | None,
    method: MatchMethod,
) -> MatchCandidate:
    return MatchCandidate(
        players=_names(group),
        team_1=_names(team_1),
        team_2=_names(team_2),
        score=score,
        method=method,
    )


def _unique_players(players: Sequence[Player]) -> list[Player]:
    """Drops repeated roster entries (by name), keeping the first occurrence."""
    seen = set()
    unique = []
    for player in players:
        if player.name in seen:
            logger.warning("Player '%s' listed more than once; ignoring duplicate", player.name)
            continue
        seen.add(player.name)
        unique.append(player)
    return unique


def rank_candidates(
    pool: Sequence[Player],
    match_log: Sequence[MatchRecord],
    config: MatchmakingConfig | None = None,
) -> tuple[list[MatchCandidate], int]:
    """
    Score every team split of the pool and rank the survivors.

    Args:
        pool: Available players (distinct names)
        match_log: The session's match log
        config: Matchmaking tunables

    Returns:
        Tuple of (non-rejected candidates sorted by total score descending,
        number of splits evaluated). Ties keep enumeration order.
    """
    config = config or MatchmakingConfig()
    history = HistoryIndex(match_log, config.partnership_memory)

    survivors = []
    evaluated = 0
    for group, team_1, team_2 in enumerate_candidates(pool):
        evaluated += 1
        score = score_match(team_1, team_2, match_log, pool, config, history)
        if score.rejected:
            continue
        survivors.append(_build_candidate(group, team_1, team_2, score, MatchMethod.SMART))

    survivors.sort(key=lambda c: c.score.total, reverse=True)
    return survivors, evaluated


def select_fair_play_fallback(
    pool: Sequence[Player],
    match_log: Sequence[MatchRecord] = (),
    config: MatchmakingConfig | None = None,
) -> MatchCandidate | None:
    """
    Deterministic selection of the four least-played players.

    Players are ordered by session match count, then by name; the first two
    form team 1 and the next two team 2. The attached score is informational.

    Returns:
        The fallback candidate, or None with fewer than four players
    """
    if len(pool) < PLAYERS_PER_COURT:
        return None

    ordered = sorted(pool, key=lambda p: (player_match_count(p), p.name))
    chosen = ordered[:PLAYERS_PER_COURT]
    team_1, team_2 = tuple(chosen[:2]), tuple(chosen[2:])
    score = score_match(team_1, team_2, match_log, pool, config)
    return _build_candidate(chosen, team_1, team_2, score, MatchMethod.FAIR_PLAY_FALLBACK)


def select_random_players(pool: Sequence[Player], rng: random.Random) -> MatchCandidate | None:
    """Four players drawn uniformly at random, teamed in draw order."""
    if len(pool) < PLAYERS_PER_COURT:
        return None

    chosen = rng.sample(list(pool), PLAYERS_PER_COURT)
    return _build_candidate(chosen, chosen[:2], chosen[2:], None, MatchMethod.RANDOM)


def search_best_match(
    pool: Sequence[Player],
    match_log: Sequence[MatchRecord],
    allow_randomness: bool = False,
    rng: random.Random | None = None,
    config: MatchmakingConfig | None = None,
) -> MatchCandidate | None:
    """
    Find the best-scoring team split, falling back to fair-play selection.

    Args:
        pool: Available players (distinct names)
        match_log: The session's match log
        allow_randomness: Pick uniformly from the top-scoring tier instead of
            the single best candidate
        rng: Random source used when ``allow_randomness`` is set
        config: Matchmaking tunables

    Returns:
        The chosen candidate, or None with fewer than four players
    """
    if len(pool) < PLAYERS_PER_COURT:
        return None

    config = config or MatchmakingConfig()
    ranked, evaluated = rank_candidates(pool, match_log, config)

    if not ranked:
        logger.warning(
            "All %d candidate splits were vetoed for fairness; using fair-play fallback",
            evaluated,
        )
        candidate = select_fair_play_fallback(pool, match_log, config)
        log_candidate_debug(logger, candidate, evaluated, evaluated)
        return candidate

    if allow_randomness:
        rng = rng or random.Random()
        top_count = max(1, int(len(ranked) * config.random_top_fraction))
        candidate = rng.choice(ranked[:top_count])
    else:
        candidate = ranked[0]

    log_candidate_debug(logger, candidate, evaluated, evaluated - len(ranked))
    return candidate


def propose_match(
    available_players: Sequence[Player],
    match_log: Sequence[MatchRecord],
    use_smart_matching: bool = True,
    allow_randomness: bool = False,
    rng: random.Random | None = None,
    config: MatchmakingConfig | None = None,
) -> MatchCandidate | None:
    """
    Propose the next match from the currently available players.

    Args:
        available_players: Snapshot of players free to take a court
        match_log: The session's match log
        use_smart_matching: Score and search team splits; otherwise pick at random
        allow_randomness: Sample from the top tier of candidates (shuffles)
        rng: Injectable random source (a fresh ``random.Random`` when None)
        config: Matchmaking tunables

    Returns:
        A MatchCandidate, or None only when fewer than four players are available
    """
    pool = _unique_players(available_players)
    if len(pool) < PLAYERS_PER_COURT:
        logger.info(
            "Not enough available players for a match (%d, need %d)",
            len(pool),
            PLAYERS_PER_COURT,
        )
        return None

    rng = rng or random.Random()

    if not use_smart_matching:
        candidate = select_random_players(pool, rng)
    else:
        candidate = search_best_match(pool, match_log, allow_randomness, rng, config)

    logger.info(
        "Proposed %s vs %s (%s)", candidate.team_1, candidate.team_2, candidate.method.value
    )
    return candidate


def generate_round(
    available_players: Sequence[Player],
    match_log: Sequence[MatchRecord],
    num_courts: int = DEFAULT_NUM_COURTS,
    use_smart_matching: bool = True,
    allow_randomness: bool = False,
    rng: random.Random | None = None,
    config: MatchmakingConfig | None = None,
) -> RoundResult:
    """
    Fill up to ``num_courts`` courts, one proposal at a time.

    Each court is filled from the players not yet assigned this round, so
    fairness is judged against whoever is still waiting.

    Raises:
        ValidationError: If ``num_courts`` is less than 1
    """
    if num_courts < 1:
        raise ValidationError("Number of courts must be at least 1.")

    rng = rng or random.Random()
    remaining = _unique_players(available_players)
    matches = []

    for court in range(1, num_courts + 1):
        candidate = propose_match(
            remaining, match_log, use_smart_matching, allow_randomness, rng, config
        )
        if candidate is None:
            break

        matches.append(
            DoublesMatch(
                court=court,
                team_1=candidate.team_1,
                team_2=candidate.team_2,
                candidate=candidate,
            )
        )
        remaining = [p for p in remaining if p.name not in candidate.players]

    if len(matches) < num_courts:
        logger.info("Filled %d of %d courts", len(matches), num_courts)

    return RoundResult(matches=matches, resting=[p.name for p in remaining])
