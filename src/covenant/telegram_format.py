"""Telegram message formatting utilities."""

import telegramify_markdown

# Telegram caps messages at 4096 chars; leave room for MarkdownV2 escapes.
MAX_MESSAGE_LENGTH = 3500


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """
    Split markdown into chunks of at most `limit` chars on line boundaries.

    Splitting happens before MarkdownV2 conversion so no escape sequence or
    task line is cut in half. Only a single line longer than `limit` is
    broken mid-line.
    """
    chunks: list[str] = []
    current: list[str] = []
    size = 0
    for line in text.splitlines():
        while len(line) > limit:
            if current:
                chunks.append("\n".join(current))
                current, size = [], 0
            chunks.append(line[:limit])
            line = line[limit:]
        # +1 for the joining newline
        extra = len(line) + (1 if current else 0)
        if current and size + extra > limit:
            chunks.append("\n".join(current))
            current, size, extra = [], 0, len(line)
        current.append(line)
        size += extra
    if current and any(current):
        chunks.append("\n".join(current))
    return chunks


async def send_markdown(target, text: str, *, chat_id: int | None = None):
    """
    Send a plan or list to Telegram as MarkdownV2.

    target is a Bot (pass chat_id) or an Update.message (replies in place).
    """
    for chunk in split_message(text):
        converted = telegramify_markdown.markdownify(chunk)
        if chat_id is not None:
            await target.send_message(chat_id=chat_id, text=converted, parse_mode="MarkdownV2")
        else:
            await target.reply_text(converted, parse_mode="MarkdownV2")
