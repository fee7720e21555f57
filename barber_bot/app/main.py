"""
barber_bot/app/main.py

Точка входа Telegram-бота.

ТОЛЬКО:
- Инициализация bot, dp
- Регистрация роутеров
- Polling

НЕ содержит логики записи.
"""

import asyncio
import logging

from aiogram import Bot, Dispatcher

from barber_bot.app.config import BOT_TOKEN, settings
from barber_bot.app.flows.client import booking, menu
from barber_bot.app.i18n.loader import load_messages
from barber_bot.app.utils.api import api


# ------------------------------------------------------------------
# Setup
# ------------------------------------------------------------------

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

if not BOT_TOKEN:
    raise RuntimeError("TG_BOT_TOKEN is not set")

bot = Bot(token=BOT_TOKEN)
dp = Dispatcher()

load_messages()


# ------------------------------------------------------------------
# Register handlers
# ------------------------------------------------------------------

dp.include_router(menu.setup(api))
dp.include_router(booking.setup(api))


async def main() -> None:
    logger.info(f"Bot started, API: {api.base_url}")
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
