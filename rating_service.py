# rating_service.py
"""
Rating service for applying confirmed match results to the roster.

The functions here sit between the pure Elo model in ``rating.py`` and the
caller that owns the roster: they compute per-participant updates for a
completed match, replay a session's log, and order players for standings.
Players are never mutated; updated copies are returned for the caller to
persist.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from app_types import (
    MatchRecord,
    Player,
    PlayerName,
    RatingHistoryEntry,
    RatingUpdate,
    Team,
)
from constants import CALIBRATION_MATCHES, RATING_PLACEHOLDER
from exceptions import SessionError
from rating import RatingChange, rating_change, team_rating, update_confidence

logger = logging.getLogger("app.rating_service")


def _rate(
    player: Player,
    opponent_rating: float,
    is_win: bool,
    match_count: int | None,
    confidence: float | None,
) -> tuple[float, RatingChange]:
    if match_count is None:
        match_count = player.match_count
    if confidence is None:
        confidence = player.confidence

    new_confidence = update_confidence(confidence, match_count, "win" if is_win else "loss")
    change = rating_change(
        player_rating=player.rating,
        opponent_rating=opponent_rating,
        is_win=is_win,
        match_count=match_count,
        confidence=new_confidence,
    )
    return new_confidence, change


def update_rating_after_match(
    player: Player,
    opponent_team_rating: float,
    is_win: bool,
    match_count: int | None = None,
    confidence: float | None = None,
) -> RatingUpdate:
    """
    Compute a participant's new rating and confidence after a match.

    Confidence is updated first and the updated value drives the K-factor.

    Args:
        player: The participant
        opponent_team_rating: Rating of the opposing team
        is_win: Whether the participant's team won
        match_count: Lifetime matches before this one (default: player's count)
        confidence: Confidence before this match (default: player's confidence)

    Returns:
        RatingUpdate with the new rating, the change and the new confidence
    """
    new_confidence, change = _rate(player, opponent_team_rating, is_win, match_count, confidence)
    return RatingUpdate(
        new_rating=change.new_rating,
        rating_change=change.rating_change,
        new_confidence=new_confidence,
    )


def _side_rating(team: Team, players: dict[PlayerName, Player]) -> float:
    ratings = [players[name].rating for name in team]
    if len(ratings) == 1:
        return ratings[0]
    return team_rating(ratings[0], ratings[1])


def apply_match_result(
    players: dict[PlayerName, Player], match: MatchRecord
) -> tuple[dict[PlayerName, Player], list[RatingHistoryEntry]]:
    """
    Apply a completed match to every participant.

    All participants are rated against the opposing team's pre-match rating.
    Lifetime and session counters are incremented, the session rating follows
    the new lifetime rating, and the session peak and lifetime extremes are
    widened when the new rating passes them.

    Args:
        players: Roster keyed by player name
        match: A completed match from the log

    Returns:
        Tuple of (roster with updated participants, rating history entries)

    Raises:
        SessionError: If the match is not completed or names unknown players
    """
    if not match.is_completed:
        raise SessionError("Cannot apply the result of a match that is not completed.")

    missing = [name for name in match.players if name not in players]
    if missing:
        raise SessionError(f"Match references unknown players: {missing}")

    team_ratings = {
        1: _side_rating(match.team_1, players),
        2: _side_rating(match.team_2, players),
    }

    updated = dict(players)
    history = []
    for side, team in ((1, match.team_1), (2, match.team_2)):
        opponent_rating = team_ratings[2 if side == 1 else 1]
        is_win = match.winning_team == side

        for name in team:
            player = players[name]
            new_confidence, change = _rate(player, opponent_rating, is_win, None, None)
            new_rating = change.new_rating

            peak = player.session_peak_rating
            updated[name] = replace(
                player,
                rating=new_rating,
                confidence=new_confidence,
                wins=player.wins + (1 if is_win else 0),
                losses=player.losses + (0 if is_win else 1),
                match_count=player.match_count + 1,
                session_wins=player.session_wins + (1 if is_win else 0),
                session_losses=player.session_losses + (0 if is_win else 1),
                session_match_count=player.session_match_count + 1,
                session_rating=new_rating,
                session_peak_rating=new_rating if peak is None else max(peak, new_rating),
                highest_rating=max(player.highest_rating, new_rating),
                lowest_rating=min(player.lowest_rating, new_rating),
            )
            history.append(
                RatingHistoryEntry(
                    player=name,
                    rating_before=player.rating,
                    rating_after=new_rating,
                    rating_change=change.rating_change,
                    was_winner=is_win,
                    opponent_rating=opponent_rating,
                    expected_score=change.expected_score,
                    k_factor=change.k_factor,
                    match_count=player.match_count,
                    confidence=new_confidence,
                    match_id=match.match_id,
                )
            )

    return updated, history


def process_session_matches(
    matches: Iterable[MatchRecord], players: dict[PlayerName, Player]
) -> tuple[dict[PlayerName, Player], list[RatingHistoryEntry]]:
    """
    Replay a session's completed matches in completion order.

    Matches that reference players missing from the roster are skipped.

    Args:
        matches: The session's match log, in any order
        players: Roster keyed by player name, as it was before the session

    Returns:
        Tuple of (final roster, rating history in replay order)
    """
    completed = [(i, m) for i, m in enumerate(matches) if m.is_completed]
    completed.sort(key=lambda item: (item[1].completed_at, item[0]))

    roster = dict(players)
    history: list[RatingHistoryEntry] = []
    for _, match in completed:
        if any(name not in roster for name in match.players):
            logger.warning("Skipping match %s: references unknown players", match.match_id)
            continue
        roster, entries = apply_match_result(roster, match)
        history.extend(entries)

    logger.info("Replayed %d completed matches for %d players", len(completed), len(roster))
    return roster, history


def sort_players_by_rating(players: Iterable[Player], use_session: bool = False) -> list[Player]:
    """Highest rated first; session rating when requested and tracked."""
    if use_session:
        return sorted(players, key=lambda p: p.effective_rating, reverse=True)
    return sorted(players, key=lambda p: p.rating, reverse=True)


def sort_players_by_wins(players: Iterable[Player]) -> list[Player]:
    """Session standings: most wins, then fewest losses, then name."""
    return sorted(players, key=lambda p: (-p.session_wins, p.session_losses, p.name))


def format_rating_display(player: Player, use_session: bool = False) -> str:
    """Rounded rating for display, or a placeholder while still calibrating."""
    if use_session:
        if player.session_match_count < CALIBRATION_MATCHES:
            return RATING_PLACEHOLDER
        return str(round(player.effective_rating))

    if player.match_count < CALIBRATION_MATCHES:
        return RATING_PLACEHOLDER
    return str(round(player.rating))


def session_standings(players: Sequence[Player]) -> list[tuple[PlayerName, int, int]]:
    """Returns (name, session wins, session losses), in standings order."""
    return [(p.name, p.session_wins, p.session_losses) for p in sort_players_by_wins(players)]
