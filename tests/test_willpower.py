"""Tests for willpower classification and guidance."""

import pytest

from covenant.core.tasks import Difficulty
from covenant.core.willpower import (
    WillpowerMode,
    WillpowerStats,
    classify_willpower,
    difficulty_preference,
    get_advice,
    get_recommendation,
    round_half_up,
    score_from_answers,
    target_count,
    update_stats,
)


class TestClassifyWillpower:
    @pytest.mark.parametrize(
        "score,mode",
        [
            (0, WillpowerMode.REST),
            (2, WillpowerMode.REST),
            (2.5, WillpowerMode.LIGHT),
            (4, WillpowerMode.LIGHT),
            (5, WillpowerMode.STANDARD),
            (7, WillpowerMode.STANDARD),
            (8, WillpowerMode.BOSS),
            (10, WillpowerMode.BOSS),
        ],
    )
    def test_thresholds(self, score, mode):
        assert classify_willpower(score) is mode


class TestTargetCount:
    @pytest.mark.parametrize("score,expected", [(None, 5), (1, 2), (3, 3), (6, 5), (9, 7)])
    def test_quota(self, score, expected):
        assert target_count(score) == expected


class TestDifficultyPreference:
    def test_reads_table(self):
        assert difficulty_preference(WillpowerMode.BOSS, Difficulty.HARD) == 2.8
        assert difficulty_preference(WillpowerMode.REST, Difficulty.EASY) == 3.0

    def test_accepts_strings(self):
        assert difficulty_preference("light", "medium") == 1.7

    def test_unknown_mode_uses_standard_row(self):
        assert difficulty_preference("heroic", "easy") == 1.4

    def test_unknown_difficulty_weighs_one(self):
        assert difficulty_preference("boss", "epic") == 1
        assert difficulty_preference("boss", None) == 1

    def test_rest_prefers_easy_boss_prefers_hard(self):
        assert difficulty_preference("rest", "easy") > difficulty_preference("rest", "hard")
        assert difficulty_preference("boss", "hard") > difficulty_preference("boss", "easy")


class TestScoreFromAnswers:
    def test_rounds_average(self):
        assert score_from_answers([7, 8, 8]) == 8
        assert score_from_answers([5, 6]) == 6

    def test_clamps_each_answer(self):
        assert score_from_answers([12, -3, 5]) == 5

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="answer"):
            score_from_answers([])

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestUpdateStats:
    def test_first_score_fills_everything(self):
        stats = update_stats(None, 7)
        assert stats == WillpowerStats(yesterday=7, week=7, month=7, year=7)

    def test_folds_into_week_and_month(self):
        stats = update_stats(WillpowerStats(yesterday=3, week=4, month=5, year=6), 8)
        assert stats.yesterday == 8
        assert stats.week == 6
        assert stats.month == 7
        assert stats.year == 6

    def test_dict_round_trip_tolerates_missing_keys(self):
        assert WillpowerStats.from_dict({"week": "4"}) == WillpowerStats(0, 4, 0, 0)


class TestAdvice:
    def test_advice_follows_mode(self):
        assert get_advice(1).title == "Recovery mode"
        assert get_advice(9).title == "Boss mode"
        assert get_advice(9).points

    def test_recommendation_without_score_prompts(self):
        assert "willpower" in get_recommendation(None).lower()

    def test_recommendation_with_score(self):
        assert get_recommendation(6) == "Standard tasks are fine."
