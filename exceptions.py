# exceptions.py
"""
Custom exceptions for the Badminton Matchmaker.

The matchmaking core degrades gracefully instead of raising; these exceptions
are reserved for malformed input at the boundaries (match records, weights,
results applied to the roster).
"""


class MatchmakingError(Exception):
    """Base exception for all matchmaker errors."""

    pass


class ValidationError(MatchmakingError):
    """Raised when input validation fails."""

    pass


class SessionError(MatchmakingError):
    """Raised when a match result cannot be applied to the roster."""

    pass
