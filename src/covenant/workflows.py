"""Shared workflow layer between CLI and Telegram.

Each function resolves its stores from config, runs the pure core over a
fresh snapshot and persists the result.
"""

import logging
from dataclasses import replace
from datetime import date, datetime

from .adapters.covenant_api import CovenantApiAdapter
from .adapters.json_store import JsonFileStore
from .config import Config
from .core.balance import BalanceSegment, Goal, can_add_goal, new_goal, set_segment_value, toggle_goal
from .core.recurrence import parse_due, to_local
from .core.tasks import Task, new_task
from .core.today import TodayPlan, assemble_today
from .core.willpower import WillpowerStats, score_from_answers, update_stats
from .ports import GoalRepository, ProfileStore, TaskRepository

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Raised when a task id does not exist in the store."""

    pass


class GoalNotFoundError(LookupError):
    """Raised when a goal id does not exist in the store."""

    pass


class GoalLimitError(ValueError):
    """Raised when a category already holds the maximum number of goals."""

    pass


def get_profile_store(config: Config) -> ProfileStore:
    """Balance and willpower always live in the local file."""
    return JsonFileStore(config.data_path(), tz=config.tzinfo())


def get_task_repository(config: Config) -> TaskRepository:
    """Resolve the task backend from config."""
    if config.backend == "api":
        return CovenantApiAdapter(config)
    return JsonFileStore(config.data_path(), tz=config.tzinfo())


def get_goal_repository(config: Config) -> GoalRepository:
    """Resolve the goal backend from config."""
    if config.backend == "api":
        return CovenantApiAdapter(config)
    return JsonFileStore(config.data_path(), tz=config.tzinfo())


def local_today(config: Config, now: datetime | None = None) -> date:
    now = now or datetime.now().astimezone()
    return to_local(now, config.tzinfo()).date()


def _resolve_prefix(ids: list[str], prefix: str) -> str | None:
    """Match a full id or a unique prefix of one (ids are shown shortened)."""
    if prefix in ids:
        return prefix
    matches = [i for i in ids if i.startswith(prefix)]
    return matches[0] if len(matches) == 1 else None


def _find_task_id(repo: TaskRepository, task_id: str) -> str:
    resolved = _resolve_prefix([e.task.id for e in repo.list_entries()], task_id)
    if resolved is None:
        raise TaskNotFoundError(f"No task with id {task_id!r}")
    return resolved


def _find_goal_id(repo: GoalRepository, goal_id: str) -> str:
    resolved = _resolve_prefix([g.id for g in repo.list_goals()], goal_id)
    if resolved is None:
        raise GoalNotFoundError(f"No goal with id {goal_id!r}")
    return resolved


# ============== Today ==============


def build_today_plan(
    config: Config,
    willpower: int | None = None,
    now: datetime | None = None,
) -> TodayPlan:
    """
    Select today's tasks.

    An explicit willpower wins; otherwise today's recorded score is used,
    and with neither the selection runs with willpower unset.
    """
    now = now or datetime.now().astimezone()
    if willpower is None:
        willpower = get_profile_store(config).load_willpower(local_today(config, now))

    entries = get_task_repository(config).list_entries()
    plan = assemble_today(entries, willpower, now=now, tz=config.tzinfo())
    logger.info(
        f"Today plan: {len(plan.entries)} task(s) from {len(entries)}, "
        f"willpower={willpower}, target={plan.target}"
    )
    return plan


def record_willpower(
    config: Config,
    score: int | None = None,
    answers: list[int] | None = None,
    now: datetime | None = None,
) -> tuple[int, WillpowerStats]:
    """Store today's willpower, from a score or from questionnaire answers."""
    if score is None:
        if not answers:
            raise ValueError("Provide a score or questionnaire answers")
        score = score_from_answers(answers)
    score = max(0, min(10, int(score)))

    store = get_profile_store(config)
    store.save_willpower(local_today(config, now), score)
    stats = update_stats(store.load_stats(), score)
    store.save_stats(stats)
    logger.info(f"Recorded willpower {score}")
    return score, stats


# ============== Tasks ==============


def add_task(
    config: Config,
    text: str,
    category: str,
    difficulty: str | None = None,
    due: str | datetime | None = None,
    recur: str | None = None,
) -> Task:
    """Create a task. Unparseable due strings are dropped, not rejected."""
    if due and parse_due(due) is None:
        logger.warning(f"Ignoring unparseable due {due!r}")
    task = new_task(text, category=category, difficulty=difficulty, due=due, recur=recur)
    return get_task_repository(config).add(category, task)


def complete_task(config: Config, task_id: str) -> Task:
    """Toggle a task; recurring tasks regenerate with their next due."""
    repo = get_task_repository(config)
    task = repo.toggle(_find_task_id(repo, task_id))
    if task is None:
        raise TaskNotFoundError(f"No task with id {task_id!r}")
    logger.info(f"Toggled task {task.id}: done={task.done} due={task.due}")
    return task


def remove_task(config: Config, task_id: str) -> None:
    repo = get_task_repository(config)
    if not repo.delete(_find_task_id(repo, task_id)):
        raise TaskNotFoundError(f"No task with id {task_id!r}")


def reschedule_task(config: Config, task_id: str, due: str | datetime | None) -> Task:
    """Move a task to a new due time. An empty due clears it."""
    repo = get_task_repository(config)
    entry = repo.get(_find_task_id(repo, task_id))
    if entry is None:
        raise TaskNotFoundError(f"No task with id {task_id!r}")
    new_due = parse_due(due)
    if due and new_due is None:
        raise ValueError(f"Unparseable due {due!r}")
    return repo.update(replace(entry.task, due=new_due))


# ============== Goals & Balance ==============


def add_goal(
    config: Config,
    title: str,
    category: str,
    increment: int | None = None,
    deadline: str | None = None,
) -> Goal:
    repo = get_goal_repository(config)
    if not can_add_goal(repo.list_goals(), category):
        raise GoalLimitError(f"Category {category!r} already has the maximum number of goals")
    return repo.add_goal(new_goal(title, category, increment=increment, deadline=deadline))


def complete_goal(config: Config, goal_id: str) -> tuple[Goal, list[BalanceSegment], bool]:
    """
    Mark a goal done and raise its balance segment by the goal's increment.

    Completing an already-done goal changes nothing and reports applied=False.
    """
    repo = get_goal_repository(config)
    goal = repo.get_goal(_find_goal_id(repo, goal_id))
    if goal is None:
        raise GoalNotFoundError(f"No goal with id {goal_id!r}")

    store = get_profile_store(config)
    balance = store.load_balance()
    if goal.done:
        return goal, balance, False

    goal, balance, applied = toggle_goal(goal, balance)
    goal = repo.update_goal(goal)
    store.save_balance(balance)
    logger.info(f"Completed goal {goal.id}; {goal.category} +{goal.increment}")
    return goal, balance, applied


def remove_goal(config: Config, goal_id: str) -> None:
    repo = get_goal_repository(config)
    if not repo.delete_goal(_find_goal_id(repo, goal_id)):
        raise GoalNotFoundError(f"No goal with id {goal_id!r}")


def set_balance(config: Config, title: str, value: int) -> list[BalanceSegment]:
    store = get_profile_store(config)
    balance = store.load_balance()
    if title not in [s.title for s in balance]:
        raise ValueError(f"Unknown balance area {title!r}")
    balance = set_segment_value(balance, title, value)
    store.save_balance(balance)
    return balance
