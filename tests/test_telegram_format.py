"""Tests for Telegram message chunking."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from covenant.telegram_format import MAX_MESSAGE_LENGTH, send_markdown, split_message


class TestSplitMessage:
    def test_short_text_is_one_chunk(self):
        assert split_message("## Today\n- [ ] Run") == ["## Today\n- [ ] Run"]

    def test_splits_on_line_boundaries(self):
        text = "\n".join(["aaaaaa"] * 3)
        assert split_message(text, limit=13) == ["aaaaaa\naaaaaa", "aaaaaa"]

    def test_long_line_is_broken(self):
        assert split_message("x" * 25, limit=10) == ["x" * 10, "x" * 10, "x" * 5]

    def test_chunks_respect_limit_and_keep_lines(self):
        text = "\n".join(f"- [ ] task number {i}" for i in range(400))
        chunks = split_message(text)
        assert len(chunks) > 1
        assert all(len(c) <= MAX_MESSAGE_LENGTH for c in chunks)
        assert "\n".join(chunks) == text

    def test_empty_text(self):
        assert split_message("") == []


class TestSendMarkdown:
    def test_sends_to_chat(self):
        bot = MagicMock()
        bot.send_message = AsyncMock()
        asyncio.run(send_markdown(bot, "## Today", chat_id=42))
        bot.send_message.assert_awaited_once()
        kwargs = bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 42
        assert kwargs["parse_mode"] == "MarkdownV2"

    def test_replies_in_chunks(self):
        message = MagicMock()
        message.reply_text = AsyncMock()
        text = "\n".join(f"- [ ] task number {i}" for i in range(400))
        asyncio.run(send_markdown(message, text))
        assert message.reply_text.await_count == len(split_message(text))
        assert message.reply_text.await_count > 1
