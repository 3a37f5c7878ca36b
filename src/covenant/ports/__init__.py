"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .goal_repo import GoalRepository
from .profile_store import ProfileStore

__all__ = [
    "TaskRepository",
    "GoalRepository",
    "ProfileStore",
]
