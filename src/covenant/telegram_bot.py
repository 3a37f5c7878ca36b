"""Covenant Telegram Bot."""

import logging

from telegram import Update, Bot
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Config, load_config
from .core.today import format_today_markdown
from .telegram_format import send_markdown
from .telegram_handlers import (
    start_handler,
    help_handler,
    today_handler,
    done_handler,
    balance_handler,
    willpower_start_handler,
    willpower_answer_handler,
    willpower_cancel_handler,
)
from .telegram_states import WillpowerStates
from .workflows import build_today_plan, get_profile_store, local_today

logger = logging.getLogger(__name__)


class AuthFilter(filters.BaseFilter):
    """Filter to only allow authorized users."""

    def __init__(self, allowed_users: list[int]):
        super().__init__()
        self.allowed_users = allowed_users

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True  # No restriction if no users configured
        user = update.effective_user
        if user is None:
            return False
        return user.id in self.allowed_users


def create_application(config: Config | None = None) -> Application:
    """Create and configure the Telegram bot application."""
    if config is None:
        config = load_config()

    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather on Telegram and add it to covenant.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()
    auth_filter = AuthFilter(config.telegram_allowed_users)

    app.add_handler(CommandHandler("start", start_handler, filters=auth_filter))
    app.add_handler(CommandHandler("help", help_handler, filters=auth_filter))
    app.add_handler(CommandHandler("today", today_handler, filters=auth_filter))
    app.add_handler(CommandHandler("done", done_handler, filters=auth_filter))
    app.add_handler(CommandHandler("balance", balance_handler, filters=auth_filter))

    willpower_conv = ConversationHandler(
        entry_points=[CommandHandler("willpower", willpower_start_handler, filters=auth_filter)],
        states={
            WillpowerStates.QUESTION: [
                CallbackQueryHandler(willpower_answer_handler, pattern=r"^wp:"),
            ],
        },
        fallbacks=[CommandHandler("cancel", willpower_cancel_handler)],
        per_user=True,
    )
    app.add_handler(willpower_conv)

    async def unauthorized_handler(update: Update, context):
        user = update.effective_user
        logger.warning(f"Unauthorized access attempt from user {user.id} ({user.username})")
        await update.message.reply_text(
            "Unauthorized. This bot is private.\n"
            "If you're the owner, add your Telegram user ID to TELEGRAM_ALLOWED_USERS in covenant.conf"
        )

    if config.telegram_allowed_users:
        app.add_handler(
            MessageHandler(~auth_filter & filters.ALL, unauthorized_handler)
        )

    return app


def _parse_hhmm(value: str) -> tuple[int, int]:
    hour, minute = map(int, value.split(":"))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(value)
    return hour, minute


def setup_scheduler(app: Application, config: Config | None = None) -> AsyncIOScheduler:
    """Set up scheduled messages."""
    if config is None:
        config = load_config()

    scheduler = AsyncIOScheduler(timezone=config.tzinfo())
    if not config.telegram_allowed_users:
        return scheduler

    if config.telegram_willpower_reminder_time:
        try:
            hour, minute = _parse_hhmm(config.telegram_willpower_reminder_time)
            scheduler.add_job(
                send_willpower_reminder,
                CronTrigger(hour=hour, minute=minute, timezone=scheduler.timezone),
                args=[app.bot, config.telegram_allowed_users, config],
                id="willpower_reminder",
            )
            logger.info(f"Scheduled willpower reminder at {hour:02d}:{minute:02d}")
        except ValueError:
            logger.warning(f"Invalid willpower reminder time format: {config.telegram_willpower_reminder_time}")

    if config.telegram_plan_time:
        try:
            hour, minute = _parse_hhmm(config.telegram_plan_time)
            scheduler.add_job(
                send_scheduled_plan,
                CronTrigger(hour=hour, minute=minute, timezone=scheduler.timezone),
                args=[app.bot, config.telegram_allowed_users, config],
                id="morning_plan",
            )
            logger.info(f"Scheduled morning plan at {hour:02d}:{minute:02d}")
        except ValueError:
            logger.warning(f"Invalid plan time format: {config.telegram_plan_time}")

    return scheduler


async def send_scheduled_plan(bot: Bot, user_ids: list[int], config: Config):
    """Send today's plan to all authorized users."""
    logger.info("Sending scheduled morning plan")
    try:
        plan = build_today_plan(config)
    except Exception as e:
        logger.error(f"Error building today plan: {e}")
        return

    text = format_today_markdown(plan)
    for user_id in user_ids:
        try:
            await send_markdown(bot, text, chat_id=user_id)
        except Exception as e:
            logger.error(f"Failed to send plan to user {user_id}: {e}")


async def send_willpower_reminder(bot: Bot, user_ids: list[int], config: Config):
    """Remind users to rate their willpower if today's score is unset."""
    if get_profile_store(config).load_willpower(local_today(config)) is not None:
        logger.info("Willpower already recorded for today, skipping reminder")
        return

    logger.info("Sending willpower reminder")
    for user_id in user_ids:
        try:
            await bot.send_message(
                chat_id=user_id,
                text="Good morning! How is your willpower today?\n\nUse /willpower to rate it.",
            )
        except Exception as e:
            logger.error(f"Failed to send willpower reminder to user {user_id}: {e}")


def run_bot():
    """Run the Telegram bot."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = load_config()
    app = create_application(config)
    scheduler = setup_scheduler(app, config)

    async def post_init(application: Application) -> None:
        """Start scheduler after event loop is running."""
        scheduler.start()
        logger.info("Scheduler started")

    app.post_init = post_init

    if config.telegram_allowed_users:
        logger.info(f"Bot authorized for users: {config.telegram_allowed_users}")
    else:
        logger.warning("No TELEGRAM_ALLOWED_USERS configured - bot is open to anyone!")

    logger.info("Starting Covenant Telegram bot...")
    app.run_polling(allowed_updates=Update.ALL_TYPES)
