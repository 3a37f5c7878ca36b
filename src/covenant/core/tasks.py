"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from .recurrence import Recurrence, next_occurrence, parse_due


class Difficulty(Enum):
    """How hard a task is. Missing or unknown values read as MEDIUM."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, raw: "str | Difficulty | None") -> "Difficulty":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


@dataclass(frozen=True)
class Task:
    """A single habit/task owned by one balance category."""

    id: str
    category: str
    text: str
    difficulty: Difficulty = Difficulty.MEDIUM
    due: datetime | None = None
    recur: Recurrence = Recurrence.NONE
    done: bool = False

    @property
    def is_recurring(self) -> bool:
        return self.recur is not Recurrence.NONE

    @classmethod
    def from_dict(cls, data: dict, category: str | None = None) -> "Task":
        """Create Task from a stored or API record."""
        return cls(
            id=str(data["id"]),
            category=category if category is not None else (data.get("category") or ""),
            text=data.get("text") or "",
            difficulty=Difficulty.parse(data.get("difficulty")),
            due=parse_due(data.get("due")),
            recur=Recurrence.parse(data.get("recur")),
            done=bool(data.get("done", False)),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "text": self.text,
            "difficulty": self.difficulty.value,
            "due": self.due.isoformat() if self.due else None,
            "recur": self.recur.value,
            "done": self.done,
        }


@dataclass(frozen=True)
class TaskEntry:
    """A task paired with the category it belongs to."""

    category: str
    task: Task


def new_task(
    text: str,
    category: str = "",
    difficulty: "str | Difficulty | None" = None,
    due=None,
    recur: "str | Recurrence | None" = None,
) -> Task:
    """
    Build a fresh, not-done task.

    Raises ValueError on blank text. An unparseable due silently becomes None.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("Task text must not be empty")
    return Task(
        id=uuid.uuid4().hex,
        category=category,
        text=text,
        difficulty=Difficulty.parse(difficulty),
        due=parse_due(due),
        recur=Recurrence.parse(recur),
        done=False,
    )


def toggle_task(task: Task, tz=None) -> Task:
    """
    Flip a task's done flag.

    Completing a recurring task with a due date regenerates it instead:
    due moves to the next occurrence (or stays put if there is none) and
    done stays False.
    """
    if not task.done and task.is_recurring and task.due:
        next_due = next_occurrence(task.due, task.recur, tz)
        return replace(task, done=False, due=next_due or task.due)
    return replace(task, done=not task.done)


def flatten_entries(tasks_by_category: dict[str, list[Task]]) -> list[TaskEntry]:
    """Turn a {category: [tasks]} mapping into a flat list of entries."""
    return [
        TaskEntry(category=category, task=task)
        for category, tasks in tasks_by_category.items()
        for task in tasks or []
    ]


def filter_by_category(entries: list[TaskEntry], category: str) -> list[TaskEntry]:
    """Filter entries to a specific category."""
    return [e for e in entries if e.category.lower() == category.lower()]


def filter_open(entries: list[TaskEntry]) -> list[TaskEntry]:
    """Filter to entries that are not done."""
    return [e for e in entries if not e.task.done]
