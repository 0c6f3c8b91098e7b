"""
Shopfront Telegram bot - entry point.

Loads settings, builds the cart storage and the per-user session registry,
and starts long polling.
"""
from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.fsm.storage.redis import RedisStorage

from shopfront.core.config import Settings, load_settings
from shopfront.core.scheduler import AsyncioScheduler
from shopfront.domain.catalog_data import default_lookup
from shopfront.handlers import build_router
from shopfront.integrations.kv_storage import create_storage
from shopfront.services.shop_session import SessionRegistry

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def build_application(settings: Settings) -> tuple[Bot, Dispatcher, SessionRegistry]:
    """Create bot runtime components from configuration."""
    bot = Bot(token=settings.require_bot_token())

    if settings.storage.backend == "redis" and settings.storage.redis_url:
        fsm_storage = RedisStorage.from_url(settings.storage.redis_url)
        logger.info("Using Redis for FSM storage")
    else:
        fsm_storage = MemoryStorage()
        logger.info("Using MemoryStorage for FSM (checkout forms are lost on restart)")

    registry = SessionRegistry(
        default_lookup(),
        create_storage(settings),
        AsyncioScheduler(),
        base_key=settings.storage.key,
        hide_delay=settings.overlay_hide_delay,
        search_debounce=settings.search_debounce,
    )

    dispatcher = Dispatcher(storage=fsm_storage)
    dispatcher.include_router(build_router(registry))
    return bot, dispatcher, registry


async def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    bot, dp, _ = build_application(settings)
    logger.info("Starting shop bot polling")
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
