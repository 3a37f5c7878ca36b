"""Balance wheel and goals - pure increment arithmetic."""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime

from .recurrence import parse_due

MIN_VALUE = 0
MAX_VALUE = 100
MAX_GOALS_PER_CATEGORY = 3
DEFAULT_INCREMENT = 5
MIN_INCREMENT = 1
MAX_INCREMENT = 20


@dataclass(frozen=True)
class BalanceSegment:
    """One life area on the balance wheel."""

    title: str
    short: str
    value: int

    def to_dict(self) -> dict:
        return {"title": self.title, "short": self.short, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "BalanceSegment":
        return cls(
            title=data["title"],
            short=data.get("short", data["title"][:1]),
            value=clamp_value(int(data.get("value", 0))),
        )


DEFAULT_BALANCE = [
    BalanceSegment("Finances", "F", 50),
    BalanceSegment("Self-realization", "SR", 65),
    BalanceSegment("Health/body", "H", 70),
    BalanceSegment("Social life", "S", 55),
    BalanceSegment("Life satisfaction", "L", 60),
]


def clamp_value(value: float) -> int:
    return int(max(MIN_VALUE, min(MAX_VALUE, value)))


def _index_of(balance: list[BalanceSegment], title: str) -> int:
    for i, segment in enumerate(balance):
        if segment.title == title:
            return i
    return -1


def set_segment_value(balance: list[BalanceSegment], title: str, value: float) -> list[BalanceSegment]:
    """Set a segment to an absolute value, clamped to 0-100."""
    idx = _index_of(balance, title)
    if idx < 0:
        return list(balance)
    result = list(balance)
    result[idx] = replace(result[idx], value=clamp_value(value))
    return result


def increment_segment(balance: list[BalanceSegment], title: str, by: float) -> list[BalanceSegment]:
    """
    Add `by` to a segment, clamped to 0-100.

    Unknown titles leave the wheel unchanged.
    """
    idx = _index_of(balance, title)
    if idx < 0:
        return list(balance)
    return set_segment_value(balance, title, balance[idx].value + by)


@dataclass(frozen=True)
class Goal:
    """A goal that moves its category's balance segment when completed."""

    id: str
    category: str
    title: str
    increment: int = DEFAULT_INCREMENT
    done: bool = False
    deadline: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        try:
            increment = int(data.get("increment") or DEFAULT_INCREMENT)
        except (TypeError, ValueError):
            increment = DEFAULT_INCREMENT
        return cls(
            id=str(data["id"]),
            category=data.get("category") or "",
            title=data.get("title") or "",
            increment=increment,
            done=bool(data.get("done", False)),
            deadline=parse_due(data.get("deadline")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "increment": self.increment,
            "done": self.done,
            "deadline": self.deadline.isoformat() if self.deadline else None,
        }


def can_add_goal(goals: list[Goal], category: str) -> bool:
    """A category holds at most MAX_GOALS_PER_CATEGORY goals."""
    return sum(1 for g in goals if g.category == category) < MAX_GOALS_PER_CATEGORY


def clamp_increment(increment) -> int:
    """Goal increments are 1-20 points; unset means the default 5."""
    if increment is None:
        return DEFAULT_INCREMENT
    try:
        value = int(increment)
    except (TypeError, ValueError):
        value = 0
    return max(MIN_INCREMENT, min(MAX_INCREMENT, value))


def new_goal(title: str, category: str, increment: int | None = None, deadline=None) -> Goal:
    title = (title or "").strip()
    if not title:
        raise ValueError("Goal title must not be empty")
    return Goal(
        id=uuid.uuid4().hex,
        category=category,
        title=title,
        increment=clamp_increment(increment),
        deadline=parse_due(deadline),
    )


def toggle_goal(goal: Goal, balance: list[BalanceSegment]) -> tuple[Goal, list[BalanceSegment], bool]:
    """
    Flip a goal's done flag.

    Returns (goal, balance, applied). Only the not-done -> done transition
    applies the increment; un-marking a goal never subtracts it again.
    """
    if goal.done:
        return replace(goal, done=False), list(balance), False
    updated = increment_segment(balance, goal.category, goal.increment)
    return replace(goal, done=True), updated, True
