# logger.py
"""
Logging configuration for the Badminton Matchmaker.

This module provides centralized logging setup. The setup_logging() function
should be called once by the embedding application at startup; the library
modules never configure handlers themselves.

All matchmaker modules use the "app" namespace:
    import logging
    logger = logging.getLogger("app.module_name")

This keeps third-party library logs quiet while allowing granular control
over the matchmaker's own logging level via the LOG_LEVEL environment variable.
"""

import logging
import os
import sys

from app_types import MatchCandidate

# App namespace prefix - all matchmaker loggers should use this
APP_LOGGER_NAME = "app"

LOG_LEVEL_ENV_VAR = "LOG_LEVEL"


def get_log_level_from_env(default: int = logging.INFO) -> int:
    """Reads the app log level from LOG_LEVEL (name or number), falling back to default."""
    value = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip()
    if not value:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default


def setup_logging(app_level: int | None = None) -> None:
    """
    Configure logging for the application.

    - Root logger is set to WARNING (keeps third-party libraries quiet)
    - App namespace logger ("app.*") is set to the specified level

    This should be called ONCE at application startup (entry point).

    Args:
        app_level: The logging level for app modules (default: LOG_LEVEL or INFO)
    """
    if app_level is None:
        app_level = get_log_level_from_env()

    # Configure root logger to WARNING - silences third-party library noise
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    # Avoid adding duplicate handlers if setup is called multiple times
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)  # Handler accepts all; loggers filter

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(app_level)


def log_candidate_debug(
    logger: logging.Logger,
    candidate: MatchCandidate,
    candidates_evaluated: int | None = None,
    candidates_rejected: int | None = None,
) -> None:
    """
    Log a match candidate's score breakdown in a consistent format.

    Args:
        logger: Logger instance to use
        candidate: The candidate to describe
        candidates_evaluated: Optional number of splits scored during the search
        candidates_rejected: Optional number of splits vetoed for fairness
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug("Method: %s", candidate.method.value)
    logger.debug("Teams: %s vs %s", candidate.team_1, candidate.team_2)

    if candidates_evaluated is not None:
        logger.debug("Candidates Evaluated: %s", candidates_evaluated)
    if candidates_rejected is not None:
        logger.debug("Candidates Rejected: %s", candidates_rejected)

    score = candidate.score
    if score is None:
        return

    logger.debug("Team Ratings: %.1f vs %.1f", score.team_1_rating, score.team_2_rating)
    logger.debug("Rating Balance: %.3f", score.rating_balance)
    logger.debug("Skill Similarity: %.3f", score.skill_similarity)
    logger.debug("Partnership Variety: %.3f", score.partnership_variety)
    logger.debug("Opponent Variety: %.3f", score.opponent_variety)
    logger.debug("Fair Play: %.3f", score.fair_play)
    logger.debug("Total: %.3f (rejected=%s)", score.total, score.rejected)
