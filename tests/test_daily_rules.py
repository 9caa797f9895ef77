"""Tests for player-of-the-day rules."""

import pytest

from games.services.daily_rules import (
    attempts_left,
    blur_percent,
    evaluate_guess,
    is_lost,
    miss_feedback,
)
from models import SquadPlayer


@pytest.fixture
def yuri():
    return SquadPlayer(
        id=1,
        team_id="corinthians",
        name="Yuri Alberto Monteiro da Silva",
        known_name="Yuri Alberto",
        position="Atacante",
        shirt_number=9,
    )


class TestBlurPercent:
    def test_starts_fully_blurred(self):
        assert blur_percent(0) == 100

    def test_ten_points_per_miss(self):
        assert blur_percent(3) == 70

    def test_zero_at_ten(self):
        assert blur_percent(10) == 0

    def test_never_negative(self):
        assert blur_percent(15) == 0

    def test_non_increasing(self):
        values = [blur_percent(n) for n in range(12)]
        assert values == sorted(values, reverse=True)


class TestAttemptBudget:
    def test_attempts_left(self):
        assert attempts_left(0) == 10
        assert attempts_left(7) == 3
        assert attempts_left(10) == 0
        assert attempts_left(12) == 0

    def test_is_lost(self):
        assert is_lost(9) is False
        assert is_lost(10) is True


class TestEvaluateGuess:
    def test_known_name_exact(self, yuri):
        evaluation = evaluate_guess("yuri alberto", yuri)
        assert evaluation.correct is True
        assert evaluation.close is False
        assert evaluation.normalized == "yuri alberto"

    def test_full_name_exact(self, yuri):
        evaluation = evaluate_guess("Yuri Alberto Monteiro da Silva", yuri)
        assert evaluation.correct is True
        assert evaluation.close is False

    def test_typo_is_close_win(self, yuri):
        evaluation = evaluate_guess("Yuri Alberot", yuri)
        assert evaluation.correct is True
        assert evaluation.close is True

    def test_wrong_player(self, yuri):
        evaluation = evaluate_guess("Romero", yuri)
        assert evaluation.correct is False
        assert evaluation.close is False

    def test_empty_guess(self, yuri):
        evaluation = evaluate_guess("   ", yuri)
        assert evaluation.correct is False
        assert evaluation.normalized == ""

    def test_player_without_known_name(self):
        player = SquadPlayer(id=2, team_id="corinthians", name="Cássio", position="Goleiro")
        assert evaluate_guess("cassio", player).correct is True


class TestMissFeedback:
    def test_close(self, yuri):
        # 1 - 5/12 against "yuri alberto"
        assert miss_feedback("alberto", yuri) == "close"

    def test_wrong(self, yuri):
        assert miss_feedback("romero", yuri) == "wrong"

    def test_empty_is_wrong(self, yuri):
        assert miss_feedback("", yuri) == "wrong"
