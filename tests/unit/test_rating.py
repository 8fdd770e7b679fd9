# tests/unit/test_rating.py
"""
Unit tests for the Elo rating model.
"""

import random

import pytest

from constants import (
    DEFAULT_RATING,
    K_FACTOR_BASE,
    K_FACTOR_EXPERIENCED,
    K_FACTOR_NEW_PLAYER,
    MAX_CONFIDENCE,
    MAX_RATING,
    MIN_CONFIDENCE,
    MIN_RATING,
    RATING_TIERS,
)
from rating import (
    expected_score,
    initial_rating,
    k_factor,
    rating_change,
    rating_tier,
    team_rating,
    update_confidence,
)

RATINGS = [100, 600, 1000, 1200, 1201, 1400, 1800, 2500, 3000]


class TestInitialRating:
    """Tests for estimating a rating from a win/loss record."""

    def test_no_matches_uses_default(self):
        assert initial_rating(0, 0) == DEFAULT_RATING

    def test_even_record_uses_default(self):
        assert initial_rating(5, 5) == pytest.approx(DEFAULT_RATING)

    def test_win_rate_shifts_rating(self):
        # 75% win rate -> +250
        assert initial_rating(3, 1) == pytest.approx(1450)
        # 25% win rate -> -250
        assert initial_rating(1, 3) == pytest.approx(950)

    def test_extremes_stay_within_bounds(self):
        assert MIN_RATING <= initial_rating(0, 50) <= MAX_RATING
        assert MIN_RATING <= initial_rating(50, 0) <= MAX_RATING

    def test_negative_counts_are_clamped(self):
        assert initial_rating(-3, -7) == DEFAULT_RATING
        assert initial_rating(4, -2) == pytest.approx(1700)


class TestExpectedScore:
    """Tests for the logistic expectation model."""

    def test_equal_ratings_give_even_odds(self):
        assert expected_score(1200, 1200) == pytest.approx(0.5)

    def test_400_point_gap(self):
        assert expected_score(1600, 1200) == pytest.approx(10 / 11)

    @pytest.mark.parametrize("rating_a", RATINGS)
    @pytest.mark.parametrize("rating_b", RATINGS)
    def test_symmetry(self, rating_a, rating_b):
        total = expected_score(rating_a, rating_b) + expected_score(rating_b, rating_a)
        assert total == pytest.approx(1.0)

    def test_stronger_player_is_favored(self):
        assert expected_score(1500, 1200) > 0.5
        assert expected_score(1200, 1500) < 0.5

    def test_stays_strictly_between_zero_and_one(self):
        assert 0.0 < expected_score(MIN_RATING, MAX_RATING) < 1.0


class TestTeamRating:
    def test_mean_of_members(self):
        assert team_rating(1000, 1400) == pytest.approx(1200)


class TestKFactor:
    """Tests for the adaptive K-factor."""

    def test_calibration_players(self):
        assert k_factor(0) == K_FACTOR_NEW_PLAYER
        assert k_factor(9) == K_FACTOR_NEW_PLAYER

    def test_established_players(self):
        assert k_factor(10) == K_FACTOR_BASE
        assert k_factor(100) == K_FACTOR_BASE

    def test_experienced_players(self):
        assert k_factor(101) == K_FACTOR_EXPERIENCED

    def test_low_confidence_increases_k(self):
        assert k_factor(50, confidence=0.5) == pytest.approx(K_FACTOR_BASE * 1.5)
        assert k_factor(50, confidence=0.5) > k_factor(50, confidence=0.9)

    def test_out_of_range_inputs_are_clamped(self):
        assert k_factor(-5) == K_FACTOR_NEW_PLAYER
        assert k_factor(50, confidence=0.1) == k_factor(50, confidence=0.5)
        assert k_factor(50, confidence=1.7) == k_factor(50, confidence=1.0)


class TestRatingChange:
    """Tests for single-match rating updates."""

    def test_even_match_win(self):
        result = rating_change(1200, 1200, is_win=True, match_count=50)

        assert result.expected_score == pytest.approx(0.5)
        assert result.k_factor == K_FACTOR_BASE
        assert result.rating_change == pytest.approx(16)
        assert result.new_rating == pytest.approx(1216)

    def test_even_match_loss(self):
        result = rating_change(1200, 1200, is_win=False, match_count=50)
        assert result.rating_change == pytest.approx(-16)

    @pytest.mark.parametrize("player", RATINGS)
    @pytest.mark.parametrize("opponent", RATINGS)
    def test_win_never_loses_points_and_loss_never_gains(self, player, opponent):
        for match_count in (0, 50, 200):
            win = rating_change(player, opponent, is_win=True, match_count=match_count)
            loss = rating_change(player, opponent, is_win=False, match_count=match_count)
            assert win.rating_change >= 0
            assert loss.rating_change <= 0

    def test_upset_win_earns_more(self):
        """Strictly larger gain for an upset, away from the rating bounds."""
        upset = rating_change(1200, 1400, is_win=True, match_count=30, confidence=0.8)
        even = rating_change(1200, 1200, is_win=True, match_count=30, confidence=0.8)
        assert upset.rating_change > even.rating_change

    def test_upset_reward_is_capped_at_max_rating(self):
        upset = rating_change(2990, 3000, is_win=True, match_count=50)
        even = rating_change(2990, 2990, is_win=True, match_count=50)

        assert upset.new_rating == even.new_rating == MAX_RATING
        assert upset.rating_change == pytest.approx(10)
        assert even.rating_change == pytest.approx(10)

    def test_new_rating_is_clamped(self):
        top = rating_change(MAX_RATING - 1, MAX_RATING, is_win=True, match_count=0)
        bottom = rating_change(MIN_RATING + 1, MIN_RATING, is_win=False, match_count=0)
        assert top.new_rating == MAX_RATING
        assert bottom.new_rating == MIN_RATING


class TestUpdateConfidence:
    """Tests for confidence updates."""

    def test_calibration_ramp(self):
        assert update_confidence(0.9, 0) == pytest.approx(0.5)
        assert update_confidence(0.5, 5) == pytest.approx(0.6)
        assert update_confidence(0.5, 9) == pytest.approx(0.68)

    def test_post_calibration_nudges(self):
        assert update_confidence(0.8, 20, "win") == pytest.approx(0.81)
        assert update_confidence(0.8, 20, "loss") == pytest.approx(0.79)
        assert update_confidence(0.8, 20) == pytest.approx(0.8)

    def test_bounds_hold_at_edges(self):
        assert update_confidence(MAX_CONFIDENCE, 50, "win") == MAX_CONFIDENCE
        assert update_confidence(MIN_CONFIDENCE, 50, "loss") == MIN_CONFIDENCE
        assert update_confidence(3.0, 50) == MAX_CONFIDENCE
        assert update_confidence(-1.0, 50) == MIN_CONFIDENCE

    def test_random_sequences_stay_in_bounds(self):
        rng = random.Random(7)
        for _ in range(20):
            confidence = rng.uniform(MIN_CONFIDENCE, MAX_CONFIDENCE)
            for match_count in range(150):
                outcome = rng.choice(["win", "loss", None])
                confidence = update_confidence(confidence, match_count, outcome)
                assert MIN_CONFIDENCE <= confidence <= MAX_CONFIDENCE


class TestRatingTier:
    """Tests for display tiers."""

    def test_tiers_are_evenly_spaced_and_ordered(self):
        band_width = (MAX_RATING - MIN_RATING) / len(RATING_TIERS)
        for i, (name, _, _) in enumerate(RATING_TIERS):
            assert rating_tier(MIN_RATING + i * band_width).name == name

    def test_default_rating_tier(self):
        assert rating_tier(DEFAULT_RATING).name == "Beginner"

    def test_out_of_range_ratings(self):
        assert rating_tier(0).name == "Unrated"
        assert rating_tier(MAX_RATING).name == "Grandmaster"
        assert rating_tier(5000).name == "Grandmaster"

    @pytest.mark.parametrize("rating", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_ratings_use_lowest_tier(self, rating):
        assert rating_tier(rating).name == RATING_TIERS[0][0]

    def test_calibrating_players(self):
        tier = rating_tier(2000, match_count=3)
        assert tier.name == "Calibrating"
        assert rating_tier(2000, match_count=30).name != "Calibrating"

    def test_tier_has_display_fields(self):
        tier = rating_tier(1800)
        assert tier.color.startswith("#")
        assert tier.icon
