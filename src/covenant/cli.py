"""Covenant CLI - habit and goal tracker."""

import json
import logging
import sys
from datetime import datetime

import click

from .adapters.covenant_api import ApiError
from .config import load_config
from .core.recurrence import Recurrence, next_occurrence, parse_due, to_local
from .core.tasks import Difficulty, filter_by_category
from .core.today import format_entry_line, format_today_markdown
from .core.willpower import WILLPOWER_QUESTIONS, get_advice, get_recommendation
from .workflows import (
    GoalLimitError,
    GoalNotFoundError,
    TaskNotFoundError,
    add_goal,
    add_task,
    build_today_plan,
    complete_goal,
    complete_task,
    get_goal_repository,
    get_profile_store,
    get_task_repository,
    record_willpower,
    remove_goal,
    remove_task,
    reschedule_task,
    set_balance,
)

DIFFICULTY_CHOICES = click.Choice([d.value for d in Difficulty])
RECUR_CHOICES = click.Choice([r.value for r in Recurrence])
USER_ERRORS = (TaskNotFoundError, GoalNotFoundError, GoalLimitError, ApiError, ValueError, KeyError)


def _fail(e: Exception) -> None:
    message = e.args[0] if isinstance(e, KeyError) and e.args else e
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _task_json(category: str, task) -> dict:
    data = task.to_dict()
    data["category"] = category
    return data


@click.group()
@click.version_option(package_name="covenant")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Covenant - habit and goal tracker."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--willpower", "-w", type=click.IntRange(0, 10), default=None,
              help="Willpower score for today (defaults to the recorded one)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def today(willpower: int | None, as_json: bool):
    """Show today's tasks, picked for your willpower."""
    config = load_config()
    try:
        plan = build_today_plan(config, willpower=willpower)
    except USER_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "date": plan.date.isoformat(),
                    "willpower": plan.willpower,
                    "mode": plan.mode.value,
                    "target": plan.target,
                    "tasks": [_task_json(e.category, e.task) for e in plan.entries],
                },
                indent=2,
            )
        )
    else:
        click.echo(format_today_markdown(plan))


@main.command()
@click.option("--category", "-c", default=None, help="Only show one category")
@click.option("--all", "show_all", is_flag=True, help="Include done tasks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(category: str | None, show_all: bool, as_json: bool):
    """List the task backlog."""
    config = load_config()
    try:
        entries = get_task_repository(config).list_entries()
    except USER_ERRORS as e:
        _fail(e)

    if category:
        entries = filter_by_category(entries, category)
    if not show_all:
        entries = [e for e in entries if not e.task.done]

    if as_json:
        click.echo(json.dumps([_task_json(e.category, e.task) for e in entries], indent=2))
        return

    if not entries:
        click.echo("No tasks.")
        return

    now = datetime.now().astimezone()
    current = None
    for entry in sorted(entries, key=lambda e: e.category):
        if entry.category != current:
            if current is not None:
                click.echo()
            click.echo(f"### {entry.category or '(no category)'}")
            current = entry.category
        click.echo(f"  {format_entry_line(entry, now, config.tzinfo())}")


@main.command()
@click.argument("text")
@click.option("--category", "-c", default=None, help="Balance area (defaults to the first configured)")
@click.option("--difficulty", "-d", type=DIFFICULTY_CHOICES, default="medium")
@click.option("--due", default=None, help="Due time, ISO-8601 (e.g. 2025-01-31T10:00)")
@click.option("--recur", "-r", type=RECUR_CHOICES, default="none")
def add(text: str, category: str | None, difficulty: str, due: str | None, recur: str):
    """Add a task."""
    config = load_config()
    category = category or (config.categories[0] if config.categories else "")
    try:
        task = add_task(config, text, category, difficulty=difficulty, due=due, recur=recur)
    except USER_ERRORS as e:
        _fail(e)
    click.echo(f"Added {task.id[:8]}: {task.text} [{category}]")
    if due and task.due is None:
        click.echo(f"Warning: could not parse due {due!r}; task has no due date", err=True)


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Toggle a task done (recurring tasks move to their next date)."""
    config = load_config()
    try:
        task = complete_task(config, task_id)
    except USER_ERRORS as e:
        _fail(e)

    if task.is_recurring and not task.done:
        due = to_local(task.due, config.tzinfo()).strftime("%a %d %b %H:%M") if task.due else "-"
        click.echo(f"✓ {task.text} - next: {due}")
    elif task.done:
        click.echo(f"✓ {task.text}")
    else:
        click.echo(f"Reopened: {task.text}")


@main.command("rm")
@click.argument("task_id")
def rm(task_id: str):
    """Delete a task."""
    config = load_config()
    try:
        remove_task(config, task_id)
    except USER_ERRORS as e:
        _fail(e)
    click.echo("Deleted.")


@main.command()
@click.argument("task_id")
@click.argument("due", required=False, default=None)
def reschedule(task_id: str, due: str | None):
    """Move a task to a new due time (omit DUE to clear it)."""
    config = load_config()
    try:
        task = reschedule_task(config, task_id, due)
    except USER_ERRORS as e:
        _fail(e)
    when = task.due.isoformat() if task.due else "no due date"
    click.echo(f"{task.text}: {when}")


@main.command("next")
@click.argument("due")
@click.argument("recur", type=RECUR_CHOICES)
def next_cmd(due: str, recur: str):
    """Show when a task due at DUE would recur next."""
    config = load_config()
    parsed = parse_due(due)
    if parsed is None:
        click.echo(f"Error: could not parse {due!r}", err=True)
        sys.exit(1)
    nxt = next_occurrence(parsed, recur, config.tzinfo())
    click.echo(nxt.isoformat() if nxt else "none")


@main.command()
@click.argument("score", type=click.IntRange(0, 10), required=False)
def willpower(score: int | None):
    """Record today's willpower (asks three questions if SCORE is omitted)."""
    config = load_config()
    answers = None
    if score is None:
        answers = []
        for question in WILLPOWER_QUESTIONS:
            click.echo(question)
            answers.append(click.prompt("0-10", type=click.IntRange(0, 10)))

    score, stats = record_willpower(config, score=score, answers=answers)
    advice = get_advice(score)

    click.echo(f"\nWillpower: {score}/10")
    click.echo(f"{advice.title}")
    for point in advice.points:
        click.echo(f"  - {point}")
    click.echo(get_recommendation(score))
    click.echo(
        f"\nYesterday {stats.yesterday} · Week {stats.week} · Month {stats.month} · Year {stats.year}"
    )


# ============== Goals ==============


@main.group(invoke_without_command=True)
@click.pass_context
def goal(ctx):
    """Manage goals (max 3 per category)."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(goal_list)


@goal.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def goal_list(as_json: bool = False):
    """List goals."""
    config = load_config()
    try:
        goals = get_goal_repository(config).list_goals()
    except USER_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([g.to_dict() for g in goals], indent=2))
        return
    if not goals:
        click.echo("No goals.")
        return
    for g in sorted(goals, key=lambda g: g.category):
        mark = "x" if g.done else " "
        deadline = f" (by {g.deadline.date().isoformat()})" if g.deadline else ""
        click.echo(f"[{mark}] {g.title} +{g.increment} [{g.category}]{deadline} #{g.id[:8]}")


@goal.command("add")
@click.argument("title")
@click.option("--category", "-c", required=True, help="Balance area the goal feeds")
@click.option("--increment", "-i", type=int, default=None, help="Balance points on completion (1-20)")
@click.option("--deadline", default=None, help="Deadline, ISO-8601")
def goal_add(title: str, category: str, increment: int | None, deadline: str | None):
    """Add a goal."""
    config = load_config()
    try:
        g = add_goal(config, title, category, increment=increment, deadline=deadline)
    except USER_ERRORS as e:
        _fail(e)
    click.echo(f"Added goal {g.id[:8]}: {g.title} [{g.category}]")


@goal.command("done")
@click.argument("goal_id")
def goal_done(goal_id: str):
    """Complete a goal and raise its balance area."""
    config = load_config()
    try:
        g, balance, applied = complete_goal(config, goal_id)
    except USER_ERRORS as e:
        _fail(e)

    if not applied:
        click.echo(f"Already done: {g.title}")
        return
    segment = next((s for s in balance if s.title == g.category), None)
    if segment:
        click.echo(f"✓ {g.title} - {segment.title} now {segment.value}/100")
    else:
        click.echo(f"✓ {g.title}")


@goal.command("rm")
@click.argument("goal_id")
def goal_rm(goal_id: str):
    """Delete a goal."""
    config = load_config()
    try:
        remove_goal(config, goal_id)
    except USER_ERRORS as e:
        _fail(e)
    click.echo("Deleted.")


# ============== Balance ==============


@main.group(invoke_without_command=True)
@click.pass_context
def balance(ctx):
    """Show or adjust the balance wheel."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(balance_show)


@balance.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def balance_show(as_json: bool = False):
    """Show balance areas."""
    segments = get_profile_store(load_config()).load_balance()
    if as_json:
        click.echo(json.dumps([s.to_dict() for s in segments], indent=2))
        return
    for s in segments:
        bar = "#" * (s.value // 5)
        click.echo(f"{s.short:>3} {s.title:24} {s.value:3} {bar}")


@balance.command("set")
@click.argument("title")
@click.argument("value", type=int)
def balance_set(title: str, value: int):
    """Set a balance area to VALUE (clamped to 0-100)."""
    config = load_config()
    try:
        segments = set_balance(config, title, value)
    except USER_ERRORS as e:
        _fail(e)
    segment = next(s for s in segments if s.title == title)
    click.echo(f"{segment.title}: {segment.value}")


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def bot(debug: bool):
    """Run the Telegram bot."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )

    try:
        from .telegram_bot import run_bot
        click.echo("Starting Covenant Telegram bot...")
        click.echo("Press Ctrl+C to stop")
        run_bot()
    except ImportError as e:
        click.echo("Error: Missing dependencies. Run 'pip install python-telegram-bot apscheduler'", err=True)
        click.echo(f"Details: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nBot stopped.")


if __name__ == "__main__":
    main()
