"""Tests for today-plan assembly and formatting."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from covenant.core.recurrence import Recurrence
from covenant.core.tasks import Difficulty, Task, TaskEntry
from covenant.core.today import assemble_today, format_entry_line, format_today_markdown
from covenant.core.willpower import WillpowerMode

UTC = ZoneInfo("UTC")


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def backlog(now):
    return [
        TaskEntry("Health/body", Task(id="run0000001", category="Health/body", text="Morning run",
                                      due=now.replace(hour=10), recur=Recurrence.DAILY)),
        TaskEntry("Finances", Task(id="budget0002", category="Finances", text="Budget review",
                                   difficulty=Difficulty.HARD, due=now + timedelta(days=2))),
        TaskEntry("Social life", Task(id="call000003", category="Social life", text="Call a friend",
                                      due=now.replace(hour=9), done=True)),
        TaskEntry("Self-realization", Task(id="read000004", category="Self-realization", text="Read")),
    ]


class TestAssembleToday:
    def test_plan_without_willpower(self, backlog, now):
        plan = assemble_today(backlog, None, now=now, tz=UTC)
        assert plan.date == date(2025, 1, 15)
        assert plan.day_of_week == "Wednesday"
        assert plan.target == 5
        assert plan.mode is WillpowerMode.STANDARD
        assert plan.advice is None
        assert [e.task.id for e in plan.entries] == ["call000003", "run0000001", "budget0002"]

    def test_done_task_keeps_its_slot(self, now):
        tomorrow = now + timedelta(days=1)
        entries = [
            TaskEntry("Finances", Task(id="done", category="Finances", text="Paid", due=tomorrow, done=True)),
            TaskEntry("Finances", Task(id="open", category="Finances", text="Pay", due=tomorrow)),
            TaskEntry("Finances", Task(id="later", category="Finances", text="Later",
                                       due=tomorrow + timedelta(hours=1))),
        ]
        # willpower 0 -> quota 2
        plan = assemble_today(entries, 0, now=now, tz=UTC)
        assert [e.task.id for e in plan.entries] == ["done", "open"]

    def test_open_only(self, backlog, now):
        plan = assemble_today(backlog, 6, now=now, tz=UTC, open_only=True)
        assert [e.task.id for e in plan.entries] == ["run0000001", "budget0002"]

    def test_plan_with_willpower(self, backlog, now):
        plan = assemble_today(backlog, 3, now=now, tz=UTC)
        assert plan.mode is WillpowerMode.LIGHT
        assert plan.target == 3
        assert plan.advice.title == "Gentle day"

    def test_overflow(self, now):
        entries = [
            TaskEntry("Finances", Task(id=str(i), category="Finances", text=f"t{i}", due=now.replace(hour=9 + i)))
            for i in range(4)
        ]
        plan = assemble_today(entries, 1, now=now, tz=UTC)
        assert len(plan.entries) == 4
        assert plan.overflow == 2


class TestFormatEntryLine:
    def test_today(self, backlog, now):
        line = format_entry_line(backlog[0], now, UTC)
        assert line == "- [ ] Morning run (medium, today 10:00, repeats daily) [Health/body] #run00000"

    def test_future(self, backlog, now):
        line = format_entry_line(backlog[1], now, UTC)
        assert "(hard, in 2d (Fri 17 Jan 08:00))" in line

    def test_overdue(self, now):
        entry = TaskEntry("Finances", Task(id="x", category="Finances", text="Taxes", due=now - timedelta(days=3)))
        assert "OVERDUE by 3d" in format_entry_line(entry, now, UTC)

    def test_done_and_undated(self, backlog, now):
        assert format_entry_line(backlog[2], now, UTC).startswith("- [x] Call a friend")
        assert "no due date" in format_entry_line(backlog[3], now, UTC)


class TestFormatTodayMarkdown:
    def test_without_willpower(self, backlog, now):
        output = format_today_markdown(assemble_today(backlog, None, now=now, tz=UTC))
        assert "## Today - Wednesday, 2025-01-15" in output
        assert "Willpower: not set" in output
        assert "### Tasks (3/5)" in output
        assert "- [x] Call a friend" in output
        assert "Morning run" in output

    def test_with_willpower_includes_advice(self, backlog, now):
        output = format_today_markdown(assemble_today(backlog, 9, now=now, tz=UTC))
        assert "Willpower: 9/10 (boss)" in output
        assert "### Boss mode" in output
        assert "_Don't forget to recover._" in output

    def test_empty_plan(self, now):
        output = format_today_markdown(assemble_today([], 5, now=now, tz=UTC))
        assert "Nothing scheduled." in output

    def test_overflow_note(self, now):
        entries = [
            TaskEntry("Finances", Task(id=str(i), category="Finances", text=f"t{i}", due=now.replace(hour=9 + i)))
            for i in range(3)
        ]
        output = format_today_markdown(assemble_today(entries, 0, now=now, tz=UTC))
        assert "1 over today's quota" in output
