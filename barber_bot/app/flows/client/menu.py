# barber_bot/app/flows/client/menu.py
"""
Главный экран клиента: приветствие + список мастеров.

Кнопка мастера → book:start:{id} (сценарий записи).
"""

import logging

from aiogram import Router
from aiogram.filters import CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from barber_bot.app.flows.client.booking import drop_session
from barber_bot.app.i18n.loader import t, resolve_lang
from barber_bot.app.keyboards.booking import providers_list_inline
from barber_bot.app.scheduling.ports import AvailabilityClient
from barber_bot.app.utils.api import ApiError, api

logger = logging.getLogger(__name__)


class ClientMenuFlow:

    def __init__(self, client: AvailabilityClient = api):
        self.client = client

    async def show_main(self, message: Message, user_name: str, lang: str) -> None:
        try:
            providers = await self.client.list_providers()
        except ApiError as e:
            logger.error(f"[MENU] Providers unavailable: {e}")
            providers = []

        text = f"{t('dashboard:welcome', lang) % user_name}\n\n{t('dashboard:providers', lang)}"
        await message.answer(text, reply_markup=providers_list_inline(providers, lang))


def setup(client: AvailabilityClient = api) -> Router:
    """Настройка роутера главного экрана."""
    router = Router(name="client_main")
    flow = ClientMenuFlow(client)

    @router.message(CommandStart())
    async def start_handler(message: Message, state: FSMContext):
        drop_session(message.chat.id)
        await state.clear()
        await flow.show_main(
            message,
            message.from_user.full_name,
            resolve_lang(message.from_user.language_code),
        )

    return router
