from __future__ import annotations

import asyncio

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from splitsettle.config import get_settings
from splitsettle.handlers import basic_router, expenses_router, participants_router
from splitsettle.logging import configure_logging, get_logger


def build_dispatcher() -> Dispatcher:
    dp = Dispatcher()
    dp.include_router(basic_router)
    dp.include_router(participants_router)
    dp.include_router(expenses_router)
    return dp


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level_value)
    if not settings.bot_token:
        raise RuntimeError("BOT_TOKEN is not set")

    bot = Bot(token=settings.bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = build_dispatcher()

    log = get_logger(__name__)
    log.info("bot.start")
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()
        log.info("bot.stop")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
