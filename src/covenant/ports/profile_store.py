"""Profile storage interface: balance wheel and willpower history."""

from datetime import date
from typing import Protocol

from covenant.core.balance import BalanceSegment
from covenant.core.willpower import WillpowerStats


class ProfileStore(Protocol):
    """Interface for per-user state that is not a task or goal."""

    def load_balance(self) -> list[BalanceSegment]:
        """Load the balance wheel, falling back to the default areas."""
        ...

    def save_balance(self, balance: list[BalanceSegment]) -> None:
        ...

    def load_willpower(self, target_date: date) -> int | None:
        """Willpower recorded for a date. Returns None if unset."""
        ...

    def save_willpower(self, target_date: date, score: int) -> None:
        ...

    def load_stats(self) -> WillpowerStats | None:
        ...

    def save_stats(self, stats: WillpowerStats) -> None:
        ...
