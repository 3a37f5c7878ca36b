"""Functional core - pure business logic with no I/O."""

from .tasks import Difficulty, Task, TaskEntry, new_task, toggle_task
from .recurrence import Recurrence, next_occurrence, parse_due
from .willpower import WillpowerMode, classify_willpower, difficulty_preference, target_count
from .selection import select_today_entries
from .today import TodayPlan, assemble_today, format_today_markdown
from .balance import BalanceSegment, Goal, increment_segment, toggle_goal

__all__ = [
    # Tasks
    "Difficulty",
    "Task",
    "TaskEntry",
    "new_task",
    "toggle_task",
    # Recurrence
    "Recurrence",
    "next_occurrence",
    "parse_due",
    # Willpower
    "WillpowerMode",
    "classify_willpower",
    "difficulty_preference",
    "target_count",
    # Selection
    "select_today_entries",
    # Today
    "TodayPlan",
    "assemble_today",
    "format_today_markdown",
    # Balance
    "BalanceSegment",
    "Goal",
    "increment_segment",
    "toggle_goal",
]
