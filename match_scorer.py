# match_scorer.py
"""
Match quality scoring for a proposed doubles split.

A candidate (two teams of two) is scored on five criteria, each normalized to
[0, 1] where 1 is best:

- Rating balance: gap between the two team ratings
- Skill similarity: spread of the four individual ratings
- Partnership variety: recent repeats of the same partnership
- Opponent variety: recent repeats of the same opposing pairings
- Fair play: session match counts relative to the least-played available player

Fair play carries the largest weight, and a candidate with a critically low
fair-play score is vetoed outright (total forced to 0) whenever the available
pool has a meaningful spread of match counts.
"""

import math
from collections.abc import Sequence
from statistics import mean, pvariance

from app_types import HistoryCount, MatchmakingConfig, MatchRecord, Player, ScoreBreakdown
from constants import (
    FAIR_PLAY_BASE_PENALTY,
    FAIR_PLAY_VARIANCE_PENALTY,
    UNBALANCED_DIFF,
    VERY_BALANCED_DIFF,
    VERY_UNBALANCED_DIFF,
)
from match_history import HistoryIndex, player_match_count
from rating import team_rating


def _team_rating(team: Sequence[Player]) -> float:
    return team_rating(team[0].effective_rating, team[1].effective_rating)


def rating_balance_score(team_1: Sequence[Player], team_2: Sequence[Player], tolerance: float) -> float:
    diff = abs(_team_rating(team_1) - _team_rating(team_2))
    return max(0.0, 1.0 - diff / tolerance)


def skill_similarity_score(players: Sequence[Player], max_rating_diff: float) -> float:
    ratings = [p.effective_rating for p in players]
    return max(0.0, 1.0 - math.sqrt(pvariance(ratings)) / max_rating_diff)


def partnership_variety_score(partnerships: Sequence[HistoryCount], max_repeated: int) -> float:
    worst_recent = max(p.recent for p in partnerships)
    return max(0.0, 1.0 - worst_recent / max_repeated)


def opponent_variety_score(oppositions: Sequence[HistoryCount], memory: int) -> float:
    avg_recent = mean(o.recent for o in oppositions)
    return max(0.0, 1.0 - avg_recent / memory)


def pool_match_count_spread(pool: Sequence[Player]) -> int:
    """Difference between the most- and least-played players in a pool."""
    if not pool:
        return 0
    counts = [player_match_count(p) for p in pool]
    return max(counts) - min(counts)


def fair_play_score(players: Sequence[Player], pool: Sequence[Player]) -> float:
    """
    Score how fairly a candidate distributes play time.

    Every candidate player with more session matches than the least-played
    player in the available pool multiplies the score by 0.1 per extra match.
    The variance of match counts within the candidate applies a further
    0.5 ** variance penalty.

    Args:
        players: The four candidate players
        pool: All currently available players

    Returns:
        Fair-play score in [0, 1]
    """
    counts = [player_match_count(p) for p in players]
    pool_counts = [player_match_count(p) for p in pool] + counts
    pool_min = min(pool_counts)

    score = 1.0
    for count in counts:
        if count > pool_min:
            score *= FAIR_PLAY_BASE_PENALTY ** (count - pool_min)

    score *= FAIR_PLAY_VARIANCE_PENALTY ** pvariance(counts)
    return max(0.0, min(1.0, score))


def score_match(
    team_1: Sequence[Player],
    team_2: Sequence[Player],
    match_log: Sequence[MatchRecord],
    available_pool: Sequence[Player],
    config: MatchmakingConfig | None = None,
    history: HistoryIndex | None = None,
) -> ScoreBreakdown:
    """
    Score a proposed doubles match.

    Args:
        team_1: The two players of the first team
        team_2: The two players of the second team
        match_log: The session's match log
        available_pool: Every player currently available, used for fair play
        config: Matchmaking tunables (defaults when None)
        history: Precomputed history of ``match_log``; built when None

    Returns:
        ScoreBreakdown with sub-scores, weighted total and the veto flag
    """
    config = config or MatchmakingConfig()
    if history is None:
        history = HistoryIndex(match_log, config.partnership_memory)

    players = list(team_1) + list(team_2)

    team_1_rating = _team_rating(team_1)
    team_2_rating = _team_rating(team_2)
    rating_balance = rating_balance_score(team_1, team_2, config.team_rating_tolerance)
    skill_similarity = skill_similarity_score(players, config.max_rating_diff)

    partnerships = [
        history.partnership(team_1[0].name, team_1[1].name),
        history.partnership(team_2[0].name, team_2[1].name),
    ]
    partnership_variety = partnership_variety_score(partnerships, config.max_repeated_partnerships)

    oppositions = [history.opponents(a.name, b.name) for a in team_1 for b in team_2]
    opponent_variety = opponent_variety_score(oppositions, config.partnership_memory)

    fair_play = fair_play_score(players, available_pool)

    rejected = (
        fair_play < config.fair_play_veto_threshold
        and pool_match_count_spread(list(available_pool) + players) > config.fair_play_veto_spread
    )

    if rejected:
        total = 0.0
    else:
        weights = config.weights
        total = (
            rating_balance * weights.rating_balance
            + skill_similarity * weights.skill_similarity
            + partnership_variety * weights.partnership_variety
            + opponent_variety * weights.opponent_variety
            + fair_play * weights.fair_play
        )

    return ScoreBreakdown(
        rating_balance=rating_balance,
        skill_similarity=skill_similarity,
        partnership_variety=partnership_variety,
        opponent_variety=opponent_variety,
        fair_play=fair_play,
        total=total,
        rejected=rejected,
        team_1_rating=team_1_rating,
        team_2_rating=team_2_rating,
    )


def match_preview(
    team_1: Sequence[Player],
    team_2: Sequence[Player],
    config: MatchmakingConfig | None = None,
) -> dict:
    """Summarizes team balance for display before a match is confirmed."""
    config = config or MatchmakingConfig()
    team_1_rating = _team_rating(team_1)
    team_2_rating = _team_rating(team_2)
    diff = abs(team_1_rating - team_2_rating)

    if diff < VERY_BALANCED_DIFF:
        label = "Very Balanced"
    elif diff > VERY_UNBALANCED_DIFF:
        label = "Very Unbalanced"
    elif diff > UNBALANCED_DIFF:
        label = "Unbalanced"
    else:
        label = "Balanced"

    return {
        "team_1_rating": round(team_1_rating),
        "team_2_rating": round(team_2_rating),
        "rating_difference": round(diff),
        "balance_label": label,
        "is_balanced": diff <= config.team_rating_tolerance,
    }
