# match_history.py
"""
Read-side queries over a session's match log.

Only completed (non-cancelled) matches are counted. The "recent" window is the
most recently completed matches: the log may be passed in any order and is
ordered newest-first by completion time before windowing, with log position
breaking ties (later entries are newer).
"""

from collections import Counter
from collections.abc import Iterable

from app_types import HistoryCount, MatchRecord, PairStats, Player, PlayerName
from constants import PARTNERSHIP_MEMORY


def completed_matches_newest_first(match_log: Iterable[MatchRecord]) -> list[MatchRecord]:
    """Returns the countable matches of a log, most recently completed first."""
    indexed = [(i, m) for i, m in enumerate(match_log) if m.is_completed]
    indexed.sort(key=lambda item: (item[1].completed_at, item[0]), reverse=True)
    return [m for _, m in indexed]


def _were_partners(match: MatchRecord, player_a: PlayerName, player_b: PlayerName) -> bool:
    return any(player_a in team and player_b in team for team in (match.team_1, match.team_2))


def _were_opponents(match: MatchRecord, player_a: PlayerName, player_b: PlayerName) -> bool:
    return (player_a in match.team_1 and player_b in match.team_2) or (
        player_a in match.team_2 and player_b in match.team_1
    )


def _count(matches: list[MatchRecord], predicate, memory: int) -> HistoryCount:
    total = 0
    recent = 0
    for position, match in enumerate(matches):
        if predicate(match):
            total += 1
            if position < memory:
                recent += 1
    return HistoryCount(total=total, recent=recent)


def partnership_history(
    player_a: PlayerName,
    player_b: PlayerName,
    match_log: Iterable[MatchRecord],
    memory: int = PARTNERSHIP_MEMORY,
) -> HistoryCount:
    """
    Count completed matches where two players were on the same team.

    Args:
        player_a: First player's name
        player_b: Second player's name
        match_log: The session's match log, in any order
        memory: Number of most recently completed matches that count as recent

    Returns:
        HistoryCount with the overall and recent partnership counts
    """
    if player_a == player_b:
        return HistoryCount()
    matches = completed_matches_newest_first(match_log)
    return _count(matches, lambda m: _were_partners(m, player_a, player_b), memory)


def opponent_history(
    player_a: PlayerName,
    player_b: PlayerName,
    match_log: Iterable[MatchRecord],
    memory: int = PARTNERSHIP_MEMORY,
) -> HistoryCount:
    """Count completed matches where two players were on opposing teams."""
    if player_a == player_b:
        return HistoryCount()
    matches = completed_matches_newest_first(match_log)
    return _count(matches, lambda m: _were_opponents(m, player_a, player_b), memory)


def _side_of(match: MatchRecord, player: PlayerName) -> int | None:
    if player in match.team_1:
        return 1
    if player in match.team_2:
        return 2
    return None


def _pair_stats(match_log: Iterable[MatchRecord], player_a: PlayerName, predicate) -> PairStats:
    wins = 0
    losses = 0
    for match in match_log:
        if not match.is_completed or not predicate(match):
            continue
        if match.winning_team == _side_of(match, player_a):
            wins += 1
        else:
            losses += 1
    return PairStats(total=wins + losses, wins=wins, losses=losses)


def head_to_head_stats(
    player_a: PlayerName, player_b: PlayerName, match_log: Iterable[MatchRecord]
) -> PairStats:
    """
    Results of completed matches where two players were opponents.

    Args:
        player_a: Player whose wins and losses are reported
        player_b: The opponent
        match_log: The match log, in any order

    Returns:
        PairStats counted from ``player_a``'s side
    """
    if player_a == player_b:
        return PairStats()
    return _pair_stats(match_log, player_a, lambda m: _were_opponents(m, player_a, player_b))


def partnership_stats(
    player_a: PlayerName, player_b: PlayerName, match_log: Iterable[MatchRecord]
) -> PairStats:
    """Results of completed matches where two players shared a team."""
    if player_a == player_b:
        return PairStats()
    return _pair_stats(match_log, player_a, lambda m: _were_partners(m, player_a, player_b))


def player_match_count(player: Player) -> int:
    """Session match count used for fair-play scoring (not the lifetime count)."""
    return player.session_match_count


class HistoryIndex:
    """Pair counts precomputed from a match log.

    Answers the same questions as ``partnership_history`` and
    ``opponent_history`` without rescanning the log, for use inside the
    candidate search where the same log is queried thousands of times.
    """

    def __init__(self, match_log: Iterable[MatchRecord], memory: int = PARTNERSHIP_MEMORY):
        self.memory = memory
        self._partners: dict[frozenset, list[int]] = {}
        self._opponents: dict[frozenset, list[int]] = {}

        for position, match in enumerate(completed_matches_newest_first(match_log)):
            is_recent = position < memory
            for team in (match.team_1, match.team_2):
                for i, a in enumerate(team):
                    for b in team[i + 1 :]:
                        self._bump(self._partners, a, b, is_recent)
            for a in match.team_1:
                for b in match.team_2:
                    self._bump(self._opponents, a, b, is_recent)

    @staticmethod
    def _bump(table: dict[frozenset, list[int]], a: PlayerName, b: PlayerName, is_recent: bool) -> None:
        counts = table.setdefault(frozenset((a, b)), [0, 0])
        counts[0] += 1
        if is_recent:
            counts[1] += 1

    @staticmethod
    def _lookup(table: dict[frozenset, list[int]], a: PlayerName, b: PlayerName) -> HistoryCount:
        total, recent = table.get(frozenset((a, b)), (0, 0))
        return HistoryCount(total=total, recent=recent)

    def partnership(self, player_a: PlayerName, player_b: PlayerName) -> HistoryCount:
        if player_a == player_b:
            return HistoryCount()
        return self._lookup(self._partners, player_a, player_b)

    def opponents(self, player_a: PlayerName, player_b: PlayerName) -> HistoryCount:
        if player_a == player_b:
            return HistoryCount()
        return self._lookup(self._opponents, player_a, player_b)


def session_match_counts(match_log: Iterable[MatchRecord]) -> Counter:
    """Counts completed matches per player name in a log."""
    counts: Counter = Counter()
    for match in match_log:
        if match.is_completed:
            counts.update(match.players)
    return counts
