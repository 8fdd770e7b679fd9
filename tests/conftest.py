import pytest

from app_types import Player
from tests.utils import make_match


@pytest.fixture
def sample_players():
    """Returns a dictionary of sample players with a spread of ratings."""
    return {
        "Alice": Player(name="Alice", rating=1500, match_count=40),
        "Bob": Player(name="Bob", rating=1450, match_count=35),
        "Charlie": Player(name="Charlie", rating=1300, match_count=20),
        "Dave": Player(name="Dave", rating=1250, match_count=25),
        "Eve": Player(name="Eve", rating=1200, match_count=12),
        "Frank": Player(name="Frank", rating=1150, match_count=15),
        "Grace": Player(name="Grace", rating=1050, match_count=8),
        "Heidi": Player(name="Heidi", rating=1000, match_count=3),
    }


@pytest.fixture
def equal_players():
    """Four equally rated players with no session matches yet."""
    return [Player(name=name, rating=1200) for name in ("A", "B", "C", "D")]


@pytest.fixture
def sample_log():
    """A small session log, oldest first, with one cancelled and one live match."""
    return [
        make_match(("Alice", "Bob"), ("Charlie", "Dave"), winning_team=1, minute=0),
        make_match(("Alice", "Charlie"), ("Bob", "Dave"), winning_team=2, minute=20),
        make_match(("Eve", "Frank"), ("Grace", "Heidi"), cancelled=True, minute=40),
        make_match(("Alice", "Bob"), ("Eve", "Frank"), winning_team=1, minute=60),
        make_match(("Grace", "Heidi"), ("Charlie", "Dave"), completed=False, minute=80),
    ]
