# rating.py
"""
Elo Rating System Implementation

This module implements an Elo-style rating model for badminton players with an
adaptive K-factor and a per-player confidence value. Doubles matches are rated
against the opposing team's rating (the mean of its two members).

All functions are pure and total: out-of-range inputs such as negative match
counts are clamped instead of raising.
"""

import math
from dataclasses import dataclass

from constants import (
    CALIBRATING_TIER,
    CALIBRATION_CONFIDENCE_STEP,
    CALIBRATION_MATCHES,
    CONFIDENCE_STEP,
    DEFAULT_RATING,
    ELO_SCALE,
    EXPERIENCED_MATCHES,
    K_FACTOR_BASE,
    K_FACTOR_EXPERIENCED,
    K_FACTOR_NEW_PLAYER,
    MAX_CONFIDENCE,
    MAX_RATING,
    MIN_CONFIDENCE,
    MIN_RATING,
    RATING_TIERS,
    WIN_RATE_RATING_SPAN,
)


@dataclass(frozen=True)
class RatingChange:
    """Outcome of applying one match result to a rating."""

    new_rating: float
    rating_change: float
    expected_score: float
    k_factor: float


@dataclass(frozen=True)
class RatingTier:
    """Display band for a rating."""

    name: str
    color: str
    icon: str


def clamp_rating(rating: float) -> float:
    return max(MIN_RATING, min(MAX_RATING, rating))


def clamp_confidence(confidence: float) -> float:
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))


def initial_rating(wins: int = 0, losses: int = 0) -> float:
    """
    Estimate a rating from a win/loss record when no rating is stored.

    A 50% win rate maps to the default rating; each 10% above or below shifts
    the estimate by 100 points.

    Args:
        wins: Number of wins (negative values count as 0)
        losses: Number of losses (negative values count as 0)

    Returns:
        Estimated rating, clamped to the supported range
    """
    wins = max(0, wins)
    losses = max(0, losses)
    total = wins + losses
    if total == 0:
        return DEFAULT_RATING

    win_rate = wins / total
    return clamp_rating(DEFAULT_RATING + (win_rate - 0.5) * WIN_RATE_RATING_SPAN)


def expected_score(rating_a: float, rating_b: float) -> float:
    """Probability that a player rated ``rating_a`` beats one rated ``rating_b``."""
    return 1.0 / (1.0 + 10.0 ** ((rating_b - rating_a) / ELO_SCALE))


def team_rating(rating_a: float, rating_b: float) -> float:
    """Team rating for doubles: mean of both members."""
    return (rating_a + rating_b) / 2.0


def k_factor(match_count: int, confidence: float = 1.0) -> float:
    """
    Compute the K-factor for a player.

    New players (calibration period) get a larger K, very experienced players a
    smaller one. Lower confidence scales K up, making updates more volatile.

    Args:
        match_count: Lifetime matches played
        confidence: Rating confidence, clamped to [0.5, 1.0]

    Returns:
        Maximum rating points transferable in one match
    """
    match_count = max(0, match_count)
    if match_count < CALIBRATION_MATCHES:
        base = K_FACTOR_NEW_PLAYER
    elif match_count > EXPERIENCED_MATCHES:
        base = K_FACTOR_EXPERIENCED
    else:
        base = K_FACTOR_BASE

    return base * (2.0 - clamp_confidence(confidence))


def rating_change(
    player_rating: float,
    opponent_rating: float,
    is_win: bool,
    match_count: int,
    confidence: float = 1.0,
) -> RatingChange:
    """
    Compute a player's rating change for a single match result.

    Args:
        player_rating: Player's current rating
        opponent_rating: Opponent rating (team rating for doubles)
        is_win: Whether the player won
        match_count: Player's lifetime match count
        confidence: Player's rating confidence

    Returns:
        RatingChange with the clamped new rating, the applied change, the
        expected score and the K-factor used

    The applied change is measured after clamping, so near the rating bounds
    an upset win can gain no more than an even one (both are capped).
    """
    player_rating = clamp_rating(player_rating)
    expected = expected_score(player_rating, opponent_rating)
    actual = 1.0 if is_win else 0.0
    k = k_factor(match_count, confidence)

    new_rating = clamp_rating(player_rating + k * (actual - expected))
    return RatingChange(
        new_rating=new_rating,
        rating_change=new_rating - player_rating,
        expected_score=expected,
        k_factor=k,
    )


def update_confidence(
    current_confidence: float, match_count: int, outcome: str | None = None
) -> float:
    """
    Update a player's rating confidence.

    During calibration confidence follows a linear ramp from 0.5 (match 0) to
    0.68 (match 9). Afterwards it moves slowly: up on wins, down on losses.

    Args:
        current_confidence: Confidence before the match
        match_count: Lifetime matches played before the match
        outcome: "win", "loss", or None when no result is known

    Returns:
        New confidence within [0.5, 1.0]
    """
    match_count = max(0, match_count)
    if match_count < CALIBRATION_MATCHES:
        return clamp_confidence(MIN_CONFIDENCE + CALIBRATION_CONFIDENCE_STEP * match_count)

    if outcome == "win":
        current_confidence += CONFIDENCE_STEP
    elif outcome == "loss":
        current_confidence -= CONFIDENCE_STEP
    return clamp_confidence(current_confidence)


def rating_tier(rating: float, match_count: int | None = None) -> RatingTier:
    """
    Map a rating to its display tier.

    Tiers are evenly spaced across the supported rating range. When a lifetime
    match count is given and the player is still calibrating, the special
    "Calibrating" tier is returned instead. Non-finite ratings map to the
    lowest tier.
    """
    if match_count is not None and match_count < CALIBRATION_MATCHES:
        return RatingTier(*CALIBRATING_TIER)
    if not math.isfinite(rating):
        return RatingTier(*RATING_TIERS[0])

    band_width = (MAX_RATING - MIN_RATING) / len(RATING_TIERS)
    index = int((rating - MIN_RATING) // band_width)
    index = max(0, min(len(RATING_TIERS) - 1, index))
    return RatingTier(*RATING_TIERS[index])
