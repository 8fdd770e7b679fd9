import logging

import pytest

from app_types import MatchCandidate, MatchMethod, ScoreBreakdown
from logger import APP_LOGGER_NAME, get_log_level_from_env, log_candidate_debug, setup_logging


@pytest.fixture
def restore_logging():
    """Restores root and app logger state changed by setup_logging."""
    root = logging.getLogger()
    app = logging.getLogger(APP_LOGGER_NAME)
    saved = (root.level, list(root.handlers), app.level)
    yield
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    app.setLevel(saved[2])


class TestLogLevelFromEnv:
    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_log_level_from_env() == logging.INFO
        assert get_log_level_from_env(logging.WARNING) == logging.WARNING

    @pytest.mark.parametrize("value, expected", [("debug", logging.DEBUG), ("ERROR", logging.ERROR), ("15", 15)])
    def test_names_and_numbers(self, monkeypatch, value, expected):
        monkeypatch.setenv("LOG_LEVEL", value)
        assert get_log_level_from_env() == expected

    def test_unknown_name_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        assert get_log_level_from_env() == logging.INFO


class TestSetupLogging:
    def test_sets_namespace_levels(self, restore_logging):
        setup_logging(logging.DEBUG)

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger(APP_LOGGER_NAME).level == logging.DEBUG
        assert logging.getLogger("app.optimizer").getEffectiveLevel() == logging.DEBUG

    def test_repeated_setup_does_not_duplicate_handlers(self, restore_logging):
        setup_logging(logging.INFO)
        handlers = list(logging.getLogger().handlers)

        setup_logging(logging.INFO)

        assert logging.getLogger().handlers == handlers


def test_log_candidate_debug(caplog):
    score = ScoreBreakdown(
        rating_balance=1.0,
        skill_similarity=0.9,
        partnership_variety=0.5,
        opponent_variety=0.8,
        fair_play=1.0,
        total=0.85,
        team_1_rating=1210.0,
        team_2_rating=1190.0,
    )
    candidate = MatchCandidate(
        players=("A", "B", "C", "D"), team_1=("A", "B"), team_2=("C", "D"), score=score
    )
    logger = logging.getLogger("app.test")

    with caplog.at_level(logging.DEBUG, logger="app.test"):
        log_candidate_debug(logger, candidate, candidates_evaluated=3, candidates_rejected=0)

    assert "Method: smart" in caplog.text
    assert "Candidates Evaluated: 3" in caplog.text
    assert "Partnership Variety: 0.500" in caplog.text

    caplog.clear()
    random_pick = MatchCandidate(
        players=("A", "B", "C", "D"), team_1=("A", "B"), team_2=("C", "D"), method=MatchMethod.RANDOM
    )
    with caplog.at_level(logging.INFO, logger="app.test"):
        log_candidate_debug(logger, random_pick)
    assert caplog.text == ""
