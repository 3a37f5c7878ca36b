"""Tests for covenant.conf parsing."""

import logging
from pathlib import Path
from unittest.mock import patch
from zoneinfo import ZoneInfo

from covenant.config import DATA_DIR, Config, load_config, parse_config


class TestParseConfig:
    def test_defaults(self):
        config = parse_config("")
        assert config.backend == "file"
        assert config.timezone == ""
        assert config.categories[0] == "Finances"
        assert config.telegram_plan_time == "07:00"

    def test_reads_keys_case_insensitively(self):
        config = parse_config(
            """
            # Covenant settings
            TIMEZONE=America/Toronto
            Backend = api
            API_BASE_URL=https://covenant.example.com/
            API_TOKEN="secret # not a comment"
            DATA_FILE=~/covenant/data.json  # local copy
            """
        )
        assert config.timezone == "America/Toronto"
        assert config.backend == "api"
        assert config.api_base_url == "https://covenant.example.com"
        assert config.api_token == "secret # not a comment"
        assert config.data_file == "~/covenant/data.json"

    def test_unknown_backend_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = parse_config("BACKEND=sqlite")
        assert config.backend == "file"
        assert "sqlite" in caplog.text

    def test_categories(self):
        config = parse_config("CATEGORIES=Work, Family ,,Health")
        assert config.categories == ["Work", "Family", "Health"]

    def test_empty_categories_keep_defaults(self):
        assert parse_config("CATEGORIES=").categories == Config().categories

    def test_telegram_settings(self):
        config = parse_config(
            "TELEGRAM_BOT_TOKEN=123:abc\n"
            "TELEGRAM_ALLOWED_USERS=111, nope, 222\n"
            "TELEGRAM_PLAN_TIME=08:15\n"
            "TELEGRAM_WILLPOWER_REMINDER_TIME='07:50'\n"
        )
        assert config.telegram_bot_token == "123:abc"
        assert config.telegram_allowed_users == [111, 222]
        assert config.telegram_plan_time == "08:15"
        assert config.telegram_willpower_reminder_time == "07:50"

    def test_skips_malformed_and_unknown_lines(self):
        config = parse_config("just some words\nFOO=bar\nTIMEZONE=UTC")
        assert config.timezone == "UTC"


class TestConfigHelpers:
    def test_tzinfo(self):
        assert Config(timezone="Europe/Berlin").tzinfo() == ZoneInfo("Europe/Berlin")

    def test_tzinfo_unset_is_system_local(self):
        assert Config().tzinfo() is None

    def test_tzinfo_unknown_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert Config(timezone="Mars/Olympus").tzinfo() is None
        assert "Mars/Olympus" in caplog.text

    def test_data_path_default(self):
        assert Config().data_path() == DATA_DIR / "covenant.json"

    def test_data_path_expands_user(self):
        path = Config(data_file="~/notes/covenant.json").data_path()
        assert path == Path.home() / "notes" / "covenant.json"


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        with patch("covenant.config.CONFIG_FILE", tmp_path / "missing.conf"):
            assert load_config() == Config()

    def test_reads_file(self, tmp_path):
        conf = tmp_path / "covenant.conf"
        conf.write_text("TIMEZONE=UTC\nBACKEND=api\n")
        with patch("covenant.config.CONFIG_FILE", conf):
            config = load_config()
        assert config.timezone == "UTC"
        assert config.backend == "api"
