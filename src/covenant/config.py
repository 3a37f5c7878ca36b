"""Configuration management for Covenant."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.balance import DEFAULT_BALANCE

logger = logging.getLogger(__name__)

COVENANT_HOME = Path(os.environ.get("COVENANT_HOME", Path.home() / "covenant"))
CONFIG_FILE = COVENANT_HOME / "config" / "covenant.conf"
DATA_DIR = COVENANT_HOME / "data"

BACKENDS = ("file", "api")


@dataclass
class Config:
    """Covenant configuration."""

    timezone: str = ""
    backend: str = "file"
    data_file: str = ""
    api_base_url: str = "http://localhost:4000"
    api_token: str = ""
    categories: list[str] = field(default_factory=lambda: [s.title for s in DEFAULT_BALANCE])
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)
    telegram_plan_time: str = "07:00"
    telegram_willpower_reminder_time: str = "06:45"

    def tzinfo(self) -> ZoneInfo | None:
        """Configured zone, or None to use the system local zone."""
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self.timezone!r}, using system local time")
            return None

    def data_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "covenant.json"


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _split_list(value: str) -> list[str]:
    return [c.strip() for c in value.split(",") if c.strip()]


def parse_config(text: str) -> Config:
    """Parse covenant.conf content. Unknown keys are ignored."""
    config = Config()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "backend":
                if value.lower() in BACKENDS:
                    config.backend = value.lower()
                else:
                    logger.warning(f"Unknown BACKEND {value!r}, keeping {config.backend!r}")
            case "data_file":
                config.data_file = value
            case "api_base_url":
                config.api_base_url = value.rstrip("/")
            case "api_token":
                config.api_token = value
            case "categories":
                config.categories = _split_list(value) or config.categories
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                users = []
                for u in _split_list(value):
                    try:
                        users.append(int(u))
                    except ValueError:
                        logger.warning(f"Ignoring non-numeric Telegram user id {u!r}")
                config.telegram_allowed_users = users
            case "telegram_plan_time":
                config.telegram_plan_time = value
            case "telegram_willpower_reminder_time":
                config.telegram_willpower_reminder_time = value

    return config


def load_config() -> Config:
    """Load configuration from covenant.conf file."""
    if not CONFIG_FILE.exists():
        return Config()
    return parse_config(CONFIG_FILE.read_text())
