# app_types.py
"""
Type aliases and record types for the Badminton Matchmaker.

This module defines the records exchanged with the session/match management
layer (players, match log entries) and the ephemeral values produced by the
matchmaking core (candidates, score breakdowns, round assignments).
"""

import math
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from constants import (
    DEFAULT_CONFIDENCE,
    DEFAULT_WEIGHTS,
    FAIR_PLAY_VETO_SPREAD,
    FAIR_PLAY_VETO_THRESHOLD,
    MAX_RATING_DIFF,
    MAX_REPEATED_PARTNERSHIPS,
    PARTNERSHIP_MEMORY,
    PLAYERS_PER_TEAM,
    RANDOM_TOP_FRACTION,
    TEAM_RATING_TOLERANCE,
)
from exceptions import ValidationError
from rating import clamp_confidence, initial_rating

# =============================================================================
# Basic Type Aliases
# =============================================================================

# A player's name (unique identifier)
PlayerName = str

# A pair of player names (a doubles team)
PlayerPair = tuple[PlayerName, PlayerName]

# A team of one (singles) or two (doubles) players
Team = tuple[PlayerName, ...]


class MatchMethod(str, Enum):
    """How a match candidate was produced."""

    SMART = "smart"
    RANDOM = "random"
    FAIR_PLAY_FALLBACK = "fair_play_fallback"


def _as_float(value: Any) -> float | None:
    """Coerce a loosely typed numeric field, returning None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _as_count(value: Any) -> int:
    """Coerce a counter field to a non-negative integer (0 when unusable)."""
    number = _as_float(value)
    if number is None or number < 0:
        return 0
    return int(number)


def _as_naive_utc(value: Any, field_name: str) -> datetime | None:
    """Normalize a match timestamp to naive UTC so every log entry is comparable."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValidationError(f"{field_name} must be a datetime, got {value!r}")
    if value.utcoffset() is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# =============================================================================
# Roster and Match Log Records
# =============================================================================


@dataclass
class Player:
    """A roster entry with lifetime and session-scoped statistics.

    Missing or malformed numeric fields are replaced with defaults rather than
    rejected: a missing rating is estimated from the win/loss record and a
    missing confidence becomes 1.0.

    Attributes:
        name: Unique player name
        rating: Lifetime skill rating
        confidence: Rating confidence in [0.5, 1.0]
        wins, losses, match_count: Lifetime counters
        session_wins, session_losses, session_match_count: Session counters
        session_rating: Current rating within the session, if tracked
        session_peak_rating: Highest rating reached in the session
        highest_rating, lowest_rating: Lifetime extremes, bracketing the rating
        database_id: Identifier owned by the persistence layer
    """

    name: PlayerName
    rating: float | None = None
    confidence: float | None = DEFAULT_CONFIDENCE
    wins: int = 0
    losses: int = 0
    match_count: int = 0
    session_wins: int = 0
    session_losses: int = 0
    session_match_count: int = 0
    session_rating: float | None = None
    session_peak_rating: float | None = None
    highest_rating: float | None = None
    lowest_rating: float | None = None
    database_id: int | str | None = None

    def __post_init__(self) -> None:
        self.wins = _as_count(self.wins)
        self.losses = _as_count(self.losses)
        self.match_count = max(_as_count(self.match_count), self.wins + self.losses)
        self.session_wins = _as_count(self.session_wins)
        self.session_losses = _as_count(self.session_losses)
        self.session_match_count = max(
            _as_count(self.session_match_count), self.session_wins + self.session_losses
        )

        rating = _as_float(self.rating)
        self.rating = rating if rating is not None else initial_rating(self.wins, self.losses)

        confidence = _as_float(self.confidence)
        self.confidence = (
            clamp_confidence(confidence) if confidence is not None else DEFAULT_CONFIDENCE
        )

        self.session_rating = _as_float(self.session_rating)
        self.session_peak_rating = _as_float(self.session_peak_rating)

        highest = _as_float(self.highest_rating)
        lowest = _as_float(self.lowest_rating)
        self.highest_rating = self.rating if highest is None else max(highest, self.rating)
        self.lowest_rating = self.rating if lowest is None else min(lowest, self.rating)

    @property
    def effective_rating(self) -> float:
        """Rating used for matchmaking: session rating when tracked, else lifetime."""
        if self.session_rating is not None:
            return self.session_rating
        return self.rating


@dataclass
class MatchRecord:
    """A historical match from the session log.

    Only matches with a completion time and no cancellation time count as
    completed for ratings and history queries. Timezone-aware timestamps are
    stored as naive UTC.
    """

    team_1: Team
    team_2: Team
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    winning_team: int | None = None
    court: int | None = None
    match_id: int | str | None = None

    def __post_init__(self) -> None:
        self.team_1 = tuple(self.team_1)
        self.team_2 = tuple(self.team_2)
        self.started_at = _as_naive_utc(self.started_at, "started_at")
        self.completed_at = _as_naive_utc(self.completed_at, "completed_at")
        self.cancelled_at = _as_naive_utc(self.cancelled_at, "cancelled_at")

        for team in (self.team_1, self.team_2):
            if not 1 <= len(team) <= PLAYERS_PER_TEAM:
                raise ValidationError(f"Teams must have 1 or 2 players, got {team}")

        all_players = self.team_1 + self.team_2
        if len(set(all_players)) != len(all_players):
            raise ValidationError(f"A player appears more than once in {all_players}")

        if self.winning_team not in (None, 1, 2):
            raise ValidationError(f"Invalid winning team: {self.winning_team}")
        if self.cancelled_at is not None and self.winning_team is not None:
            raise ValidationError("A cancelled match cannot have a winning team")
        if self.is_completed and self.winning_team is None:
            raise ValidationError("A completed match must record a winning team")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None and self.cancelled_at is None

    @property
    def players(self) -> Team:
        return self.team_1 + self.team_2

    @property
    def winners(self) -> Team:
        if self.winning_team == 1:
            return self.team_1
        if self.winning_team == 2:
            return self.team_2
        return ()

    @property
    def losers(self) -> Team:
        if self.winning_team == 1:
            return self.team_2
        if self.winning_team == 2:
            return self.team_1
        return ()


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class ScoringWeights:
    """Weights of the five match-score criteria. Must sum to 1.0."""

    rating_balance: float = DEFAULT_WEIGHTS["rating_balance"]
    skill_similarity: float = DEFAULT_WEIGHTS["skill_similarity"]
    partnership_variety: float = DEFAULT_WEIGHTS["partnership_variety"]
    opponent_variety: float = DEFAULT_WEIGHTS["opponent_variety"]
    fair_play: float = DEFAULT_WEIGHTS["fair_play"]

    def __post_init__(self) -> None:
        values = [getattr(self, f.name) for f in fields(self)]
        if any(v < 0 for v in values):
            raise ValidationError(f"Scoring weights must be non-negative: {values}")
        if not math.isclose(sum(values), 1.0, abs_tol=1e-6):
            raise ValidationError(f"Scoring weights must sum to 1.0, got {sum(values)}")

    @classmethod
    def with_partnership_weight(cls, weight: float) -> "ScoringWeights":
        """Sets the partnership variety weight, rescaling the others to keep the sum at 1."""
        if not 0.0 <= weight <= 1.0:
            raise ValidationError(f"Partnership weight must be within [0, 1], got {weight}")

        others = {k: v for k, v in DEFAULT_WEIGHTS.items() if k != "partnership_variety"}
        scale = (1.0 - weight) / sum(others.values())
        return cls(
            partnership_variety=weight,
            **{k: v * scale for k, v in others.items()},
        )


@dataclass
class MatchmakingConfig:
    """Tunables for the match scorer and team search."""

    team_rating_tolerance: float = TEAM_RATING_TOLERANCE
    max_rating_diff: float = MAX_RATING_DIFF
    max_repeated_partnerships: int = MAX_REPEATED_PARTNERSHIPS
    partnership_memory: int = PARTNERSHIP_MEMORY
    fair_play_veto_threshold: float = FAIR_PLAY_VETO_THRESHOLD
    fair_play_veto_spread: int = FAIR_PLAY_VETO_SPREAD
    random_top_fraction: float = RANDOM_TOP_FRACTION
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    @classmethod
    def from_settings(cls, settings: dict[str, Any] | None) -> "MatchmakingConfig":
        """Builds a config from a session's smart-matching settings.

        Recognized keys: ``eloRange`` (max individual rating spread),
        ``teamBalance`` (max team rating gap) and ``varietyWeight``
        (partnership variety weight). Unknown keys are ignored.
        """
        config = cls()
        if not settings:
            return config

        try:
            if settings.get("eloRange") is not None:
                config.max_rating_diff = float(settings["eloRange"])
            if settings.get("teamBalance") is not None:
                config.team_rating_tolerance = float(settings["teamBalance"])
            if settings.get("varietyWeight") is not None:
                config.weights = ScoringWeights.with_partnership_weight(
                    float(settings["varietyWeight"])
                )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid smart matching settings: {settings}") from e

        if config.max_rating_diff <= 0 or config.team_rating_tolerance <= 0:
            raise ValidationError("Rating tolerances must be positive")
        return config


# =============================================================================
# Matchmaking Results
# =============================================================================


@dataclass(frozen=True)
class HistoryCount:
    """How often two players met, overall and within the recent window."""

    total: int = 0
    recent: int = 0


@dataclass(frozen=True)
class PairStats:
    """Results of the completed matches two players shared, from the first player's side."""

    total: int = 0
    wins: int = 0
    losses: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / self.total if self.total else 0.0


@dataclass
class ScoreBreakdown:
    """Sub-scores (each in [0, 1], higher is better) and weighted total.

    A rejected candidate has been vetoed for fairness; its total is 0.
    """

    rating_balance: float
    skill_similarity: float
    partnership_variety: float
    opponent_variety: float
    fair_play: float
    total: float
    rejected: bool = False
    team_1_rating: float = 0.0
    team_2_rating: float = 0.0


@dataclass
class MatchCandidate:
    """A proposed (unpersisted) match: four players split into two teams.

    Attributes:
        players: The four selected player names
        team_1: Names of the first team
        team_2: Names of the second team
        score: Score breakdown, or None when selected without scoring
        method: How the candidate was produced
    """

    players: tuple[PlayerName, ...]
    team_1: PlayerPair
    team_2: PlayerPair
    score: ScoreBreakdown | None = None
    method: MatchMethod = MatchMethod.SMART


@dataclass
class DoublesMatch:
    """A doubles court assignment within a round.

    Attributes:
        court: Court number (1-indexed)
        team_1: Tuple of player names for team 1
        team_2: Tuple of player names for team 2
        candidate: The candidate the assignment was built from
    """

    court: int
    team_1: PlayerPair
    team_2: PlayerPair
    candidate: MatchCandidate


# List of court assignments for a round
MatchList = list[DoublesMatch]


@dataclass
class RoundResult:
    """Court assignments for a round.

    Attributes:
        matches: Court assignments, ordered by court number
        resting: Players left without a court this round
        success: Whether at least one court was filled
    """

    matches: MatchList
    resting: list[PlayerName]
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = len(self.matches) > 0


@dataclass(frozen=True)
class RatingUpdate:
    """A participant's new rating and confidence after a confirmed match."""

    new_rating: float
    rating_change: float
    new_confidence: float


@dataclass
class RatingHistoryEntry:
    """A single player's rating movement caused by one match."""

    player: PlayerName
    rating_before: float
    rating_after: float
    rating_change: float
    was_winner: bool
    opponent_rating: float
    expected_score: float
    k_factor: float
    match_count: int
    confidence: float
    match_id: int | str | None = None
