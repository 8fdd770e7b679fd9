"""
Player registry data processing utilities.

This module normalizes roster and match-log tables coming from the
persistence layer into the records used by the matchmaking core. Field names
differ between sources (camelCase from the client, snake_case and database
column names from storage), so each concept accepts every known alias. Empty
cells (None/NaN) are treated as missing and left for the records to default.
"""

import logging
from collections.abc import Mapping
from typing import Any

import pandas as pd

from app_types import MatchRecord, Player, PlayerName
from exceptions import ValidationError

logger = logging.getLogger("app.player_registry")

# Player field -> accepted source column names, in priority order
PLAYER_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "Player Name", "player_name"),
    "rating": ("rating", "elo", "current_elo", "Rating"),
    "confidence": ("confidence", "Confidence"),
    "wins": ("wins", "total_wins"),
    "losses": ("losses", "total_losses"),
    "match_count": ("match_count", "matchCount", "total_matches"),
    "session_wins": ("session_wins", "sessionWins"),
    "session_losses": ("session_losses", "sessionLosses"),
    "session_match_count": ("session_match_count", "sessionMatchCount", "session_matches"),
    "session_rating": ("session_rating", "sessionElo", "session_elo_current"),
    "session_peak_rating": ("session_peak_rating", "sessionEloPeak", "session_elo_peak"),
    "highest_rating": ("highest_rating", "highestElo", "highest_elo"),
    "lowest_rating": ("lowest_rating", "lowestElo", "lowest_elo"),
    "database_id": ("database_id", "id"),
}

ROSTER_COLUMNS = [
    "#",
    "Player Name",
    "Rating",
    "Confidence",
    "wins",
    "losses",
    "match_count",
    "session_wins",
    "session_losses",
    "session_match_count",
    "session_rating",
    "session_peak_rating",
    "highest_rating",
    "lowest_rating",
    "database_id",
]

MATCH_TEAM_COLUMNS = {
    1: ("team1_player1_id", "team1_player2_id"),
    2: ("team2_player1_id", "team2_player2_id"),
}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # Sequences (e.g. team tuples) are never "missing" as a whole
        return False


def _first_present(row: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    for key in aliases:
        if key in row and not _is_missing(row[key]):
            return row[key]
    return None


def _timestamp(value: Any):
    if _is_missing(value):
        return None
    return pd.Timestamp(value).to_pydatetime()


def record_to_player(row: Mapping[str, Any]) -> Player:
    """
    Builds a Player from a loosely shaped record.

    Args:
        row: Mapping (dict or pandas Series) using any known field aliases

    Returns:
        Player with missing fields defaulted

    Raises:
        ValidationError: If the record has no player name
    """
    values = {field: _first_present(row, aliases) for field, aliases in PLAYER_FIELD_ALIASES.items()}

    name = values.pop("name")
    if name is None or not str(name).strip():
        raise ValidationError(f"Player record has no name: {dict(row)}")

    kwargs = {field: value for field, value in values.items() if value is not None}
    return Player(name=str(name).strip(), **kwargs)


def dataframe_to_players(df: pd.DataFrame) -> dict[PlayerName, Player]:
    """
    Converts a roster DataFrame into a Player dict.

    Rows without a name are skipped. When a name appears more than once the
    first row wins.

    Args:
        df: Roster table, e.g. from the registry editor or a database export

    Returns:
        Dictionary mapping player names to Player objects
    """
    players: dict[PlayerName, Player] = {}
    for _, row in df.iterrows():
        try:
            player = record_to_player(row)
        except ValidationError:
            logger.warning("Skipping roster row without a player name")
            continue

        if player.name in players:
            logger.warning("Duplicate roster entry for '%s' ignored", player.name)
            continue
        players[player.name] = player

    return players


def create_roster_dataframe(players: dict[PlayerName, Player]) -> pd.DataFrame:
    """Creates a DataFrame for the roster editor from Player objects."""
    df_data = {
        "#": range(1, len(players) + 1),
        "Player Name": [p.name for p in players.values()],
        "Rating": [p.rating for p in players.values()],
        "Confidence": [p.confidence for p in players.values()],
        "wins": [p.wins for p in players.values()],
        "losses": [p.losses for p in players.values()],
        "match_count": [p.match_count for p in players.values()],
        "session_wins": [p.session_wins for p in players.values()],
        "session_losses": [p.session_losses for p in players.values()],
        "session_match_count": [p.session_match_count for p in players.values()],
        "session_rating": [p.session_rating for p in players.values()],
        "session_peak_rating": [p.session_peak_rating for p in players.values()],
        "highest_rating": [p.highest_rating for p in players.values()],
        "lowest_rating": [p.lowest_rating for p in players.values()],
        "database_id": [p.database_id for p in players.values()],
    }
    return pd.DataFrame(df_data, columns=ROSTER_COLUMNS)


def _id_key(value: Any) -> str:
    # pandas turns integer id columns with gaps into floats (3 -> 3.0)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def player_id_map(players: Mapping[PlayerName, Player]) -> dict[str, PlayerName]:
    """Maps each roster player's database id to their name."""
    return {
        _id_key(player.database_id): name
        for name, player in players.items()
        if not _is_missing(player.database_id)
    }


def _team_from_row(
    row: Mapping[str, Any], side: int, id_to_name: Mapping[str, PlayerName] | None
) -> tuple[PlayerName, ...]:
    team = row.get(f"team_{side}")
    if not _is_missing(team):
        return tuple(team)

    keys = [_id_key(row[col]) for col in MATCH_TEAM_COLUMNS[side] if col in row and not _is_missing(row[col])]
    if id_to_name is None:
        return tuple(keys)

    unknown = [key for key in keys if key not in id_to_name]
    if unknown:
        raise ValidationError(f"Unknown player ids on team {side}: {unknown}")
    return tuple(id_to_name[key] for key in keys)


def record_to_match(row: Mapping[str, Any], id_to_name: Mapping[str, PlayerName] | None = None) -> MatchRecord:
    """
    Builds a MatchRecord from a database-style row.

    Teams come either from ``team_1``/``team_2`` sequences or from the
    ``team1_player1_id``-style columns. When ``id_to_name`` is given (see
    ``player_id_map``) the id columns are resolved to player names.

    Raises:
        ValidationError: If the row violates match invariants or names an
            id missing from ``id_to_name``
    """
    winning_team = _first_present(row, ("winning_team", "winner_side"))
    match_id = _first_present(row, ("match_id", "id"))
    court = _first_present(row, ("court", "court_number"))

    return MatchRecord(
        team_1=_team_from_row(row, 1, id_to_name),
        team_2=_team_from_row(row, 2, id_to_name),
        started_at=_timestamp(_first_present(row, ("started_at",))),
        completed_at=_timestamp(_first_present(row, ("completed_at",))),
        cancelled_at=_timestamp(_first_present(row, ("cancelled_at",))),
        winning_team=None if winning_team is None else int(winning_team),
        court=None if court is None else int(court),
        match_id=match_id,
    )


def dataframe_to_matches(
    df: pd.DataFrame, players: Mapping[PlayerName, Player] | None = None
) -> list[MatchRecord]:
    """
    Converts a match-log DataFrame into MatchRecords, preserving row order.

    Args:
        df: Match-log table
        players: Roster keyed by name; when given, ``team1_player1_id``-style
            columns are read as database ids and resolved to names

    Rows that violate match invariants or reference unknown ids are skipped
    and logged.
    """
    id_to_name = None if players is None else player_id_map(players)
    matches = []
    for index, row in df.iterrows():
        try:
            matches.append(record_to_match(row, id_to_name))
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Skipping invalid match row %s: %s", index, e)
    return matches
