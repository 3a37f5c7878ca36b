"""Today's task selection - pure, deterministic for a fixed `now`."""

from dataclasses import replace
from datetime import datetime, tzinfo

from .recurrence import parse_due, to_local
from .tasks import Difficulty, TaskEntry
from .willpower import (
    SCORING_FALLBACK,
    classify_willpower,
    difficulty_preference,
    target_count,
)

# Minutes after which a task stops getting any closeness credit.
CLOSENESS_WINDOW = 5000


def is_same_local_day(a: datetime, b: datetime, tz: tzinfo | None = None) -> bool:
    """True if both instants fall on the same local calendar day."""
    return to_local(a, tz).date() == to_local(b, tz).date()


def _minutes_between(a: datetime, b: datetime, tz: tzinfo | None) -> float:
    return abs((to_local(a, tz) - to_local(b, tz)).total_seconds()) / 60


def select_today_entries(
    entries: list[TaskEntry],
    willpower: float | None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[TaskEntry]:
    """
    Pick and order the entries to show as today's work.

    Every entry due today is kept, earliest first, even past the quota.
    Remaining slots are filled from the other dated entries, ranked by
    closeness to now weighted by how well their difficulty suits today's
    willpower. Entries without a parseable due date never appear.
    """
    now = now or datetime.now().astimezone()
    mode = classify_willpower(willpower if willpower is not None else SCORING_FALLBACK)
    target = target_count(willpower)

    dated: list[tuple[TaskEntry, datetime]] = []
    for entry in entries:
        due = parse_due(entry.task.due)
        if due is not None:
            dated.append((entry, due))

    todays = sorted(
        (pair for pair in dated if is_same_local_day(pair[1], now, tz)),
        key=lambda pair: to_local(pair[1], tz),
    )

    scored = []
    for entry, due in dated:
        if is_same_local_day(due, now, tz):
            continue
        minutes_away = _minutes_between(due, now, tz)
        closeness = CLOSENESS_WINDOW - min(CLOSENESS_WINDOW, minutes_away)
        pref = difficulty_preference(mode, Difficulty.parse(entry.task.difficulty))
        scored.append((entry, closeness * pref))
    # sorted() is stable, so ties keep input order
    others = [entry for entry, _ in sorted(scored, key=lambda pair: -pair[1])]

    remaining = max(target - len(todays), 0)
    return [entry for entry, _ in todays] + others[:remaining]


def _in_range(entries: list, index: int) -> bool:
    return 0 <= index < len(entries)


def reschedule_today_entry(
    entries: list[TaskEntry],
    index: int,
    new_due: datetime | None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[TaskEntry]:
    """
    Set a new due on the entry at `index`.

    The entry drops out of today's list when the new due is another day.
    Clearing the due keeps it in place until the next selection.
    """
    if not _in_range(entries, index):
        return list(entries)
    now = now or datetime.now().astimezone()
    result = list(entries)
    entry = result[index]
    result[index] = replace(entry, task=replace(entry.task, due=new_due))
    if new_due is not None and not is_same_local_day(new_due, now, tz):
        del result[index]
    return result


def postpone_today_entry(entries: list[TaskEntry], index: int) -> list[TaskEntry]:
    """Drop an entry from today's list without touching the task."""
    result = list(entries)
    if _in_range(result, index):
        del result[index]
    return result


def move_today_entry(entries: list[TaskEntry], source: int, destination: int) -> list[TaskEntry]:
    """Move an entry to a new position in today's list."""
    result = list(entries)
    if not _in_range(result, source) or not _in_range(result, destination):
        return result
    moved = result.pop(source)
    result.insert(destination, moved)
    return result
