"""Tests for the click command line."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from covenant.cli import main
from covenant.config import Config
from covenant.workflows import get_task_repository


@pytest.fixture
def config(tmp_path):
    return Config(data_file=str(tmp_path / "covenant.json"), timezone="UTC")


@pytest.fixture
def cli(config):
    runner = CliRunner()
    with patch("covenant.cli.load_config", return_value=config):
        yield lambda *args, **kwargs: runner.invoke(main, list(args), **kwargs)


class TestTasks:
    def test_add_and_list(self, cli):
        result = cli("add", "Morning run", "-c", "Health/body", "-d", "hard", "-r", "daily")
        assert result.exit_code == 0
        assert "Morning run [Health/body]" in result.output

        result = cli("tasks")
        assert "### Health/body" in result.output
        assert "Morning run (hard, no due date, repeats daily)" in result.output

    def test_add_defaults_to_first_category(self, cli):
        result = cli("add", "Budget")
        assert "[Finances]" in result.output

    def test_tasks_json(self, cli):
        cli("add", "Budget", "-c", "Finances", "--due", "2025-02-01T09:00:00Z")
        data = json.loads(cli("tasks", "--json").output)
        assert data[0]["text"] == "Budget"
        assert data[0]["due"] == "2025-02-01T09:00:00+00:00"

    def test_add_unparseable_due_warns(self, cli):
        result = cli("add", "Call", "--due", "whenever")
        assert result.exit_code == 0
        assert "could not parse due" in result.output

    def test_done_and_rm(self, cli, config):
        cli("add", "Budget", "-c", "Finances")
        task_id = get_task_repository(config).list_entries()[0].task.id

        result = cli("done", task_id[:8])
        assert "✓ Budget" in result.output

        result = cli("rm", task_id)
        assert result.exit_code == 0
        assert get_task_repository(config).list_entries() == []

    def test_done_unknown_task_fails(self, cli):
        result = cli("done", "nope")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_next(self, cli):
        result = cli("next", "2025-01-10T10:00:00Z", "weekdays")
        assert result.output.strip() == "2025-01-13T10:00:00+00:00"

    def test_next_unparseable(self, cli):
        result = cli("next", "friday", "daily")
        assert result.exit_code == 1


class TestToday:
    def test_today_json(self, cli):
        result = cli("today", "-w", "3", "--json")
        data = json.loads(result.output)
        assert data["mode"] == "light"
        assert data["target"] == 3
        assert data["tasks"] == []

    def test_today_markdown(self, cli):
        result = cli("today")
        assert "## Today" in result.output
        assert "Willpower: not set" in result.output


class TestWillpower:
    def test_score_argument(self, cli):
        result = cli("willpower", "9")
        assert "Willpower: 9/10" in result.output
        assert "Boss mode" in result.output

    def test_questionnaire(self, cli):
        result = cli("willpower", input="7\n8\n8\n")
        assert result.exit_code == 0
        assert "How well did you sleep" in result.output
        assert "Willpower: 8/10" in result.output


class TestGoalsAndBalance:
    def test_goal_add_list_done(self, cli, config):
        result = cli("goal", "add", "Run 5k", "-c", "Health/body", "-i", "10")
        assert result.exit_code == 0

        result = cli("goal")
        assert "[ ] Run 5k +10 [Health/body]" in result.output

        goal_id = result.output.strip().split("#")[-1]
        result = cli("goal", "done", goal_id)
        assert "Health/body now 80/100" in result.output

        result = cli("goal", "done", goal_id)
        assert "Already done" in result.output

    def test_goal_limit_fails(self, cli):
        for i in range(3):
            cli("goal", "add", f"Goal {i}", "-c", "Finances")
        result = cli("goal", "add", "Goal 4", "-c", "Finances")
        assert result.exit_code == 1
        assert "maximum" in result.output

    def test_balance_show_and_set(self, cli):
        result = cli("balance")
        assert "Finances" in result.output

        result = cli("balance", "set", "Finances", "120")
        assert result.output.strip() == "Finances: 100"

    def test_balance_set_unknown_fails(self, cli):
        result = cli("balance", "set", "Hobbies", "10")
        assert result.exit_code == 1
        assert "Error: Unknown balance area 'Hobbies'" in result.output
