"""Goal repository interface."""

from typing import Protocol

from covenant.core.balance import Goal


class GoalRepository(Protocol):
    """Interface for reading and mutating goals."""

    def list_goals(self) -> list[Goal]:
        ...

    def get_goal(self, goal_id: str) -> Goal | None:
        ...

    def add_goal(self, goal: Goal) -> Goal:
        ...

    def update_goal(self, goal: Goal) -> Goal:
        ...

    def delete_goal(self, goal_id: str) -> bool:
        ...
