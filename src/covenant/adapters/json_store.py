"""File-based JSON storage adapter."""

import json
import logging
import os
from dataclasses import replace
from datetime import date, tzinfo
from pathlib import Path

from covenant.core.balance import DEFAULT_BALANCE, BalanceSegment, Goal
from covenant.core.tasks import Task, TaskEntry, toggle_task
from covenant.core.willpower import WillpowerStats

logger = logging.getLogger(__name__)


def _empty() -> dict:
    return {"tasks": [], "goals": [], "balance": None, "willpower": {}, "stats": None}


class JsonFileStore:
    """
    Single-file JSON storage.

    Implements TaskRepository, GoalRepository and ProfileStore protocols.
    The file is re-read on every call and rewritten atomically, so several
    processes (CLI and bot) can share it between mutations.
    """

    def __init__(self, path: Path | str, tz: tzinfo | None = None):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.tz = tz

    # ---- low-level helpers ----

    def _read(self) -> dict:
        if not self.path.exists():
            return _empty()
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt store {self.path}: {e}; starting empty")
            return _empty()
        if not isinstance(data, dict):
            logger.warning(f"Unexpected store layout in {self.path}; starting empty")
            return _empty()
        merged = _empty()
        merged.update(data)
        return merged

    def _write(self, data: dict) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False))
        os.replace(tmp, self.path)

    def _tasks(self, data: dict) -> list[Task]:
        tasks = []
        for raw in data["tasks"]:
            try:
                tasks.append(Task.from_dict(raw))
            except KeyError:
                logger.warning(f"Skipping task record without id: {raw!r}")
        return tasks

    def _save_tasks(self, data: dict, tasks: list[Task]) -> None:
        data["tasks"] = [t.to_dict() for t in tasks]
        self._write(data)

    # ---- TaskRepository ----

    def list_entries(self) -> list[TaskEntry]:
        return [TaskEntry(category=t.category, task=t) for t in self._tasks(self._read())]

    def get(self, task_id: str) -> TaskEntry | None:
        for entry in self.list_entries():
            if entry.task.id == task_id:
                return entry
        return None

    def add(self, category: str, task: Task) -> Task:
        data = self._read()
        tasks = self._tasks(data)
        stored = replace(task, category=category)
        tasks.append(stored)
        self._save_tasks(data, tasks)
        logger.debug(f"Added task {stored.id} to {category!r}")
        return stored

    def update(self, task: Task) -> Task:
        data = self._read()
        tasks = self._tasks(data)
        for i, existing in enumerate(tasks):
            if existing.id == task.id:
                tasks[i] = task
                break
        else:
            raise KeyError(task.id)
        self._save_tasks(data, tasks)
        return task

    def delete(self, task_id: str) -> bool:
        data = self._read()
        tasks = self._tasks(data)
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) == len(tasks):
            return False
        self._save_tasks(data, remaining)
        return True

    def toggle(self, task_id: str) -> Task | None:
        entry = self.get(task_id)
        if entry is None:
            return None
        return self.update(toggle_task(entry.task, self.tz))

    # ---- GoalRepository ----

    def _goals(self, data: dict) -> list[Goal]:
        return [Goal.from_dict(g) for g in data["goals"]]

    def _save_goals(self, data: dict, goals: list[Goal]) -> None:
        data["goals"] = [g.to_dict() for g in goals]
        self._write(data)

    def list_goals(self) -> list[Goal]:
        return self._goals(self._read())

    def get_goal(self, goal_id: str) -> Goal | None:
        return next((g for g in self.list_goals() if g.id == goal_id), None)

    def add_goal(self, goal: Goal) -> Goal:
        data = self._read()
        goals = self._goals(data)
        goals.append(goal)
        self._save_goals(data, goals)
        return goal

    def update_goal(self, goal: Goal) -> Goal:
        data = self._read()
        goals = self._goals(data)
        for i, existing in enumerate(goals):
            if existing.id == goal.id:
                goals[i] = goal
                break
        else:
            raise KeyError(goal.id)
        self._save_goals(data, goals)
        return goal

    def delete_goal(self, goal_id: str) -> bool:
        data = self._read()
        goals = self._goals(data)
        remaining = [g for g in goals if g.id != goal_id]
        if len(remaining) == len(goals):
            return False
        self._save_goals(data, remaining)
        return True

    # ---- ProfileStore ----

    def load_balance(self) -> list[BalanceSegment]:
        raw = self._read()["balance"]
        if not raw:
            return list(DEFAULT_BALANCE)
        return [BalanceSegment.from_dict(s) for s in raw]

    def save_balance(self, balance: list[BalanceSegment]) -> None:
        data = self._read()
        data["balance"] = [s.to_dict() for s in balance]
        self._write(data)

    def load_willpower(self, target_date: date) -> int | None:
        value = self._read()["willpower"].get(target_date.isoformat())
        return int(value) if value is not None else None

    def save_willpower(self, target_date: date, score: int) -> None:
        data = self._read()
        data["willpower"][target_date.isoformat()] = score
        self._write(data)

    def load_stats(self) -> WillpowerStats | None:
        raw = self._read()["stats"]
        return WillpowerStats.from_dict(raw) if raw else None

    def save_stats(self, stats: WillpowerStats) -> None:
        data = self._read()
        data["stats"] = stats.to_dict()
        self._write(data)
