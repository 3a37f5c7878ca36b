"""Conversation states for Telegram bot."""

from enum import IntEnum, auto


class WillpowerStates(IntEnum):
    """States for the willpower questionnaire."""

    QUESTION = auto()
