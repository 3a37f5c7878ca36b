"""Telegram command handlers."""

import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes, ConversationHandler

from .adapters.covenant_api import ApiError
from .config import load_config
from .core.recurrence import to_local
from .core.today import format_today_markdown
from .core.willpower import WILLPOWER_QUESTIONS, get_advice, get_recommendation
from .telegram_format import send_markdown
from .telegram_states import WillpowerStates
from .workflows import TaskNotFoundError, build_today_plan, complete_task, get_profile_store, record_willpower

logger = logging.getLogger(__name__)


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hey! I'm Covenant, your habit tracker.\n\n"
        "Commands:\n"
        "/today - Today's tasks\n"
        "/willpower - Rate today's willpower\n"
        "/done <id> - Complete a task\n"
        "/balance - Balance wheel\n"
        "/help - Show all commands"
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(
        "*Covenant Commands*\n\n"
        "/today - Tasks picked for today's willpower\n"
        "/willpower - Three quick questions to rate your willpower\n"
        "/done <id> - Complete a task (recurring ones move to the next date)\n"
        "/balance - Show the balance wheel\n"
        "/cancel - Cancel current operation\n",
        parse_mode="Markdown",
    )


async def today_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /today command - show today's selection."""
    config = load_config()
    try:
        plan = build_today_plan(config)
    except ApiError as e:
        logger.error(f"Failed to load tasks for /today: {e}")
        await update.message.reply_text(f"Failed to load tasks: {e}")
        return

    await send_markdown(update.message, format_today_markdown(plan))


async def done_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /done <id> - toggle a task."""
    if not context.args:
        await update.message.reply_text("Usage: /done <task id>")
        return

    config = load_config()
    try:
        task = complete_task(config, context.args[0])
    except TaskNotFoundError:
        await update.message.reply_text(f"No task with id {context.args[0]}.")
        return
    except ApiError as e:
        await update.message.reply_text(f"Failed to update task: {e}")
        return

    if task.is_recurring and not task.done and task.due:
        next_due = to_local(task.due, config.tzinfo()).strftime("%a %d %b %H:%M")
        await update.message.reply_text(f"Done: {task.text}\nNext: {next_due}")
    elif task.done:
        await update.message.reply_text(f"Done: {task.text}")
    else:
        await update.message.reply_text(f"Reopened: {task.text}")


async def balance_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /balance command."""
    segments = get_profile_store(load_config()).load_balance()
    lines = [f"`{s.short:>3}` {s.title}: {s.value}" for s in segments]
    await update.message.reply_text(
        "*Balance*\n\n" + "\n".join(lines),
        parse_mode="Markdown",
    )


# ============== Willpower Conversation ==============


def _score_keyboard() -> InlineKeyboardMarkup:
    row1 = [InlineKeyboardButton(str(v), callback_data=f"wp:{v}") for v in range(0, 6)]
    row2 = [InlineKeyboardButton(str(v), callback_data=f"wp:{v}") for v in range(6, 11)]
    return InlineKeyboardMarkup([row1, row2])


async def willpower_start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start the willpower questionnaire."""
    context.user_data["willpower_answers"] = []
    await update.message.reply_text(
        f"*Willpower check* (1/{len(WILLPOWER_QUESTIONS)})\n\n{WILLPOWER_QUESTIONS[0]}",
        parse_mode="Markdown",
        reply_markup=_score_keyboard(),
    )
    return WillpowerStates.QUESTION


async def willpower_answer_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Collect one answer; save the score after the last question."""
    query = update.callback_query
    await query.answer()

    if not query.data.startswith("wp:"):
        return WillpowerStates.QUESTION

    answers = context.user_data.setdefault("willpower_answers", [])
    answers.append(int(query.data[3:]))

    if len(answers) < len(WILLPOWER_QUESTIONS):
        step = len(answers)
        await query.edit_message_text(
            f"*Willpower check* ({step + 1}/{len(WILLPOWER_QUESTIONS)})\n\n{WILLPOWER_QUESTIONS[step]}",
            parse_mode="Markdown",
            reply_markup=_score_keyboard(),
        )
        return WillpowerStates.QUESTION

    config = load_config()
    score, stats = record_willpower(config, answers=answers)
    advice = get_advice(score)
    points = "\n".join(f"- {p}" for p in advice.points)

    await query.edit_message_text(
        f"*Willpower: {score}/10*\n\n"
        f"*{advice.title}*\n{points}\n\n"
        f"{get_recommendation(score)}\n\n"
        f"Week {stats.week} · Month {stats.month}\n"
        "Use /today for your tasks.",
        parse_mode="Markdown",
    )
    context.user_data.pop("willpower_answers", None)
    return ConversationHandler.END


async def willpower_cancel_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Cancel the willpower conversation."""
    context.user_data.pop("willpower_answers", None)
    await update.message.reply_text("Willpower check cancelled.")
    return ConversationHandler.END
