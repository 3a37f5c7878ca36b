"""Task repository interface."""

from typing import Protocol

from covenant.core.tasks import Task, TaskEntry


class TaskRepository(Protocol):
    """Interface for reading and mutating tasks in any backend."""

    def list_entries(self) -> list[TaskEntry]:
        """Fetch every task paired with its category."""
        ...

    def get(self, task_id: str) -> TaskEntry | None:
        """Fetch one task. Returns None if not found."""
        ...

    def add(self, category: str, task: Task) -> Task:
        """Store a new task under a category and return it as stored."""
        ...

    def update(self, task: Task) -> Task:
        """Replace a stored task."""
        ...

    def delete(self, task_id: str) -> bool:
        """Delete a task. Returns False if it did not exist."""
        ...

    def toggle(self, task_id: str) -> Task | None:
        """Toggle a task's done flag (regenerating recurring tasks)."""
        ...
