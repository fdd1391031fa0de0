import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

from kidquiz.config import settings
from kidquiz.db.database import get_db, close_db
from kidquiz.handlers import start, quiz, history
from kidquiz.llm.client import close_client
from kidquiz.services.controller import ControllerRegistry
from kidquiz.services.history_store import HistoryStore
from kidquiz.store.client import ResultStore

logger = logging.getLogger("kidquiz")


def configure_logging():
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def build_history_store() -> HistoryStore:
    if not settings.store_configured:
        logger.warning("SUPABASE_URL or SUPABASE_ANON_KEY not set, history is local-only")
        return HistoryStore(None)
    store = ResultStore(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        table=settings.SUPABASE_TABLE,
        timeout=settings.STORE_TIMEOUT,
    )
    return HistoryStore(store)


async def main():
    configure_logging()

    if not settings.BOT_TOKEN:
        logger.error("BOT_TOKEN is not set. Create a .env file based on .env.example")
        sys.exit(1)
    if not settings.LLM_API_KEY:
        logger.warning("LLM_API_KEY is not set, quiz generation will likely fail")

    # Local key/value store for device ids
    await get_db()

    history_store = build_history_store()
    registry = ControllerRegistry(history_store)

    bot = Bot(token=settings.BOT_TOKEN)
    dp = Dispatcher(storage=MemoryStorage(), registry=registry)

    dp.include_router(start.router)
    dp.include_router(quiz.router)
    dp.include_router(history.router)

    await bot.set_my_commands([
        BotCommand(command="start", description="Trang chủ"),
    ])

    logger.info("Bot started")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await history_store.close()
        await close_client()
        await close_db()
        await bot.session.close()
        logger.info("Bot stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
