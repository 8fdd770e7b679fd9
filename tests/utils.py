import random
from datetime import datetime, timedelta

from app_types import MatchRecord, Player

BASE_TIME = datetime(2024, 3, 1, 18, 0)
MATCH_DURATION = timedelta(minutes=15)


def generate_random_players(n, rating_range=(900.0, 1600.0), max_session_matches=0, seed=None):
    """
    Generates N players with names P1 to Pn and random ratings.

    Args:
        n: Number of players to generate
        rating_range: Tuple of (min_rating, max_rating)
        max_session_matches: Upper bound for random session match counts
        seed: Optional seed for reproducible rosters

    Returns:
        List of Player objects.
    """
    rng = random.Random(seed)
    players = []
    for i in range(1, n + 1):
        players.append(
            Player(
                name=f"P{i}",
                rating=rng.uniform(*rating_range),
                session_match_count=rng.randint(0, max_session_matches),
            )
        )
    return players


def make_match(team_1, team_2, winning_team=1, minute=0, completed=True, cancelled=False, match_id=None):
    """
    Builds a MatchRecord starting ``minute`` minutes into the session.

    Cancelled and in-progress matches carry no winner.
    """
    started_at = BASE_TIME + timedelta(minutes=minute)
    if cancelled:
        return MatchRecord(
            team_1=team_1,
            team_2=team_2,
            started_at=started_at,
            cancelled_at=started_at + timedelta(minutes=1),
            match_id=match_id,
        )
    if not completed:
        return MatchRecord(team_1=team_1, team_2=team_2, started_at=started_at, match_id=match_id)
    return MatchRecord(
        team_1=team_1,
        team_2=team_2,
        started_at=started_at,
        completed_at=started_at + MATCH_DURATION,
        winning_team=winning_team,
        match_id=match_id,
    )


def build_log(pairings, start_minute=0):
    """Completed matches (team 1 winning) for a list of (team_1, team_2), oldest first."""
    return [
        make_match(team_1, team_2, minute=start_minute + 20 * i)
        for i, (team_1, team_2) in enumerate(pairings)
    ]
