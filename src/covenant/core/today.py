"""Pure today-plan assembly logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from .recurrence import Recurrence, parse_due, to_local
from .selection import is_same_local_day, select_today_entries
from .tasks import TaskEntry, filter_open
from .willpower import (
    SCORING_FALLBACK,
    Advice,
    WillpowerMode,
    classify_willpower,
    get_advice,
    get_recommendation,
    target_count,
)


@dataclass
class TodayPlan:
    """Assembled plan for the day, ready for formatting."""

    date: date
    day_of_week: str
    willpower: int | None
    mode: WillpowerMode
    target: int
    entries: list[TaskEntry]
    advice: Advice | None
    recommendation: str
    now: datetime
    tz: tzinfo | None = None

    @property
    def overflow(self) -> int:
        """How many entries exceed the quota (today's tasks are never cut)."""
        return max(len(self.entries) - self.target, 0)


def assemble_today(
    entries: list[TaskEntry],
    willpower: int | None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
    open_only: bool = False,
) -> TodayPlan:
    """
    Assemble today's plan from the full backlog.

    Pure function - no I/O. Done tasks stay in the pool, so one ticked off
    today is still listed (as done) and still uses a slot. open_only
    drops them before selection.
    """
    now = now or datetime.now().astimezone()
    pool = filter_open(entries) if open_only else entries
    selected = select_today_entries(pool, willpower, now=now, tz=tz)
    local_now = to_local(now, tz)

    return TodayPlan(
        date=local_now.date(),
        day_of_week=local_now.strftime("%A"),
        willpower=willpower,
        mode=classify_willpower(willpower if willpower is not None else SCORING_FALLBACK),
        target=target_count(willpower),
        entries=selected,
        advice=get_advice(willpower) if willpower is not None else None,
        recommendation=get_recommendation(willpower),
        now=now,
        tz=tz,
    )


def format_entry_line(entry: TaskEntry, now: datetime, tz: tzinfo | None = None) -> str:
    """
    Format a single entry for display.

    Pure function - no I/O.
    """
    task = entry.task
    due = parse_due(task.due)

    when = "no due date"
    if due is not None:
        local_due = to_local(due, tz)
        if is_same_local_day(due, now, tz):
            when = f"today {local_due.strftime('%H:%M')}"
        else:
            days = (local_due.date() - to_local(now, tz).date()).days
            if days < 0:
                when = f"OVERDUE by {-days}d"
            else:
                when = f"in {days}d ({local_due.strftime('%a %d %b %H:%M')})"

    repeat = f", repeats {task.recur.value}" if task.recur is not Recurrence.NONE else ""
    check = "x" if task.done else " "
    return f"- [{check}] {task.text} ({task.difficulty.value}, {when}{repeat}) [{entry.category}] #{task.id[:8]}"


def format_today_markdown(plan: TodayPlan) -> str:
    """
    Format a plan into markdown.

    Pure function - no I/O.
    """
    if plan.willpower is None:
        header = f"## Today - {plan.day_of_week}, {plan.date.isoformat()}\n\nWillpower: not set"
    else:
        header = (
            f"## Today - {plan.day_of_week}, {plan.date.isoformat()}\n\n"
            f"Willpower: {plan.willpower}/10 ({plan.mode.value})"
        )

    lines = [header, "", plan.recommendation]

    if plan.advice:
        lines.append("")
        lines.append(f"### {plan.advice.title}")
        lines.extend(f"- {p}" for p in plan.advice.points)
        if plan.advice.note:
            lines.append(f"_{plan.advice.note}_")

    lines.append("")
    lines.append(f"### Tasks ({len(plan.entries)}/{plan.target})")
    if plan.entries:
        lines.extend(format_entry_line(e, plan.now, plan.tz) for e in plan.entries)
    else:
        lines.append("Nothing scheduled.")
    if plan.overflow:
        lines.append("")
        lines.append(f"{plan.overflow} over today's quota - all of them are due today.")

    return "\n".join(lines)
