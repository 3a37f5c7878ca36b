"""Willpower classification, daily quota and guidance."""

import math
from dataclasses import dataclass, field
from enum import Enum


class WillpowerMode(Enum):
    """Daily capacity bucket derived from a 0-10 willpower score."""

    REST = "rest"
    LIGHT = "light"
    STANDARD = "standard"
    BOSS = "boss"


# Score used to rank non-today tasks when no willpower was entered.
SCORING_FALLBACK = 6
# Quota used when no willpower was entered.
DEFAULT_TARGET = 5

QUOTA = {
    WillpowerMode.REST: 2,
    WillpowerMode.LIGHT: 3,
    WillpowerMode.STANDARD: 5,
    WillpowerMode.BOSS: 7,
}

PREFERENCE = {
    "rest": {"easy": 3.0, "medium": 1.5, "hard": 0.2},
    "light": {"easy": 2.2, "medium": 1.7, "hard": 0.6},
    "standard": {"easy": 1.4, "medium": 1.8, "hard": 1.4},
    "boss": {"easy": 0.7, "medium": 1.6, "hard": 2.8},
}

WILLPOWER_QUESTIONS = [
    "How well did you sleep last night?",
    "How rested do you feel right now?",
    "How much energy do you have for hard tasks?",
]


def classify_willpower(score: float) -> WillpowerMode:
    """Map a score to a mode using inclusive upper thresholds 2/4/7."""
    if score <= 2:
        return WillpowerMode.REST
    if score <= 4:
        return WillpowerMode.LIGHT
    if score <= 7:
        return WillpowerMode.STANDARD
    return WillpowerMode.BOSS


def target_count(score: float | None) -> int:
    """Number of tasks to fill for today."""
    if score is None:
        return DEFAULT_TARGET
    return QUOTA[classify_willpower(score)]


def difficulty_preference(mode, difficulty) -> float:
    """
    Relative weight of a difficulty under a willpower mode.

    Both arguments may be enums or their string values. An unknown mode
    falls back to the standard row; a difficulty missing from the row
    weighs 1.
    """
    mode_key = getattr(mode, "value", mode)
    diff_key = getattr(difficulty, "value", difficulty)
    row = PREFERENCE.get(mode_key, PREFERENCE["standard"])
    return row.get(diff_key, 1)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def score_from_answers(answers: list[int]) -> int:
    """Average the questionnaire answers (each clamped to 0-10)."""
    if not answers:
        raise ValueError("At least one answer is required")
    clamped = [max(0, min(10, a)) for a in answers]
    return round_half_up(sum(clamped) / len(clamped))


@dataclass
class Advice:
    """Guidance for a willpower mode."""

    title: str
    points: list[str] = field(default_factory=list)
    note: str = ""


ADVICE = {
    WillpowerMode.REST: Advice(
        title="Recovery mode",
        points=["Sleep 8-9 hours", "Easy walk, 20-30 min", "Eat without a deficit"],
        note="Focus on recharging.",
    ),
    WillpowerMode.LIGHT: Advice(
        title="Gentle day",
        points=["2-4 short tasks", "One recovery block", "Light activity"],
        note="Avoid overload.",
    ),
    WillpowerMode.STANDARD: Advice(
        title="Standard mode",
        points=["3-5 planned tasks", "Moderate workout", "Meals as planned"],
        note="Keep the pace.",
    ),
    WillpowerMode.BOSS: Advice(
        title="Boss mode",
        points=["1-3 hard tasks", "Deep work 2x50-75 min", "Intense workout"],
        note="Don't forget to recover.",
    ),
}

RECOMMENDATIONS = {
    WillpowerMode.REST: "Full rest.",
    WillpowerMode.LIGHT: "Light tasks plus recovery.",
    WillpowerMode.STANDARD: "Standard tasks are fine.",
    WillpowerMode.BOSS: "You can take on 1-3 boss tasks.",
}


def get_advice(score: float) -> Advice:
    return ADVICE[classify_willpower(score)]


def get_recommendation(score: float | None) -> str:
    if score is None:
        return "Enter a willpower score to get today's recommendation."
    return RECOMMENDATIONS[classify_willpower(score)]


@dataclass
class WillpowerStats:
    """Rolling willpower summary shown next to the meter."""

    yesterday: int
    week: int
    month: int
    year: int

    def to_dict(self) -> dict:
        return {
            "yesterday": self.yesterday,
            "week": self.week,
            "month": self.month,
            "year": self.year,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WillpowerStats":
        return cls(
            yesterday=int(data.get("yesterday", 0)),
            week=int(data.get("week", 0)),
            month=int(data.get("month", 0)),
            year=int(data.get("year", 0)),
        )


def update_stats(stats: WillpowerStats | None, score: int) -> WillpowerStats:
    """Fold a fresh score into the summary. Year is left untouched."""
    if stats is None:
        return WillpowerStats(yesterday=score, week=score, month=score, year=score)
    return WillpowerStats(
        yesterday=score,
        week=round_half_up((stats.week + score) / 2),
        month=round_half_up((stats.month + score) / 2),
        year=stats.year,
    )
