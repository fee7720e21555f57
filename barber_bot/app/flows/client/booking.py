# barber_bot/app/flows/client/booking.py
"""
Сценарий записи для клиента (Telegram).

Flow:
1. /book [provider_id] или кнопка мастера на главном экране
2. Мастер / дата (календарь) → слоты дня (утро / день)
3. Час → кнопка «Записаться» → POST /appointments
4. Успех → экран «запись создана», ошибка → alert, выбор сохраняется

Вся логика состояния в SchedulingController, здесь только
callback → intent → перерисовка сообщения.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from aiogram import Bot, Router, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message, User

from barber_bot.app.config import DATE_PICKER_AUTO_CLOSE, SUBMIT_TIMEOUT
from barber_bot.app.i18n.loader import t, resolve_lang
from barber_bot.app.keyboards.booking import booking_inline, booking_text, created_text
from barber_bot.app.scheduling.controller import SchedulingController
from barber_bot.app.scheduling.errors import SubmissionError, ValidationError
from barber_bot.app.scheduling.models import UserIdentity
from barber_bot.app.scheduling.state import Phase
from barber_bot.app.scheduling.ports import APPOINTMENT_CREATED, AvailabilityClient
from barber_bot.app.utils.api import api

logger = logging.getLogger(__name__)


# ==============================================================
# FSM States
# ==============================================================

class ClientBooking(StatesGroup):
    """Активная сессия записи."""
    active = State()


# ==============================================================
# Session registry (in memory, one per chat)
# ==============================================================

@dataclass
class BookingSession:
    bot: Bot
    chat_id: int
    lang: str
    calendar_month: date
    message_id: Optional[int] = None
    controller: Optional[SchedulingController] = field(default=None, repr=False)


_sessions: dict[int, BookingSession] = {}


def get_session(chat_id: int) -> Optional[BookingSession]:
    return _sessions.get(chat_id)


def drop_session(chat_id: int) -> None:
    session = _sessions.pop(chat_id, None)
    if session and session.controller:
        session.controller.close()


def identity_from_user(user: User) -> UserIdentity:
    """Identity provider: Telegram profile → display identity."""
    return UserIdentity(name=user.full_name, avatar_url="")


async def render(session: BookingSession) -> None:
    """Перерисовать сообщение записи по состоянию контроллера."""
    controller = session.controller
    if controller is None or session.message_id is None:
        return

    user_name = controller.user.name if controller.user else None
    try:
        await session.bot.edit_message_text(
            text=booking_text(controller.state, user_name, session.lang),
            chat_id=session.chat_id,
            message_id=session.message_id,
            reply_markup=booking_inline(controller.state, session.lang, session.calendar_month, date.today()),
        )
    except TelegramBadRequest as e:
        # "message is not modified"
        logger.debug(f"[BOOKING] Render skipped: {e}")


# ==============================================================
# Navigator
# ==============================================================

class TelegramNavigator:
    """Exit points of the booking screen: edit the booking message."""

    def __init__(self, session: BookingSession):
        self.session = session

    async def _replace(self, text: str) -> None:
        s = self.session
        if _sessions.get(s.chat_id) is s:
            drop_session(s.chat_id)
        elif s.controller:
            # /book was sent again, the chat belongs to a newer session
            s.controller.close()
        if s.message_id is None:
            await s.bot.send_message(s.chat_id, text)
            return
        try:
            await s.bot.edit_message_text(text=text, chat_id=s.chat_id, message_id=s.message_id, reply_markup=None)
        except TelegramBadRequest as e:
            logger.warning(f"[BOOKING] Exit screen edit failed: {e}")
            await s.bot.send_message(s.chat_id, text)

    async def go_back(self) -> None:
        await self._replace(t("booking:cancelled", self.session.lang))

    async def complete_with(self, screen: str, payload: dict[str, Any]) -> None:
        if screen != APPOINTMENT_CREATED:
            raise ValueError(f"unknown screen: {screen}")
        await self._replace(created_text(payload["date"], self.session.lang))


# ==============================================================
# Flow Setup
# ==============================================================

def setup(
    client: AvailabilityClient = api,
    auto_close_on_select: bool = DATE_PICKER_AUTO_CLOSE,
    submit_timeout: Optional[float] = SUBMIT_TIMEOUT,
) -> Router:
    """Настройка роутера записи."""
    router = Router(name="client_booking")

    # ==========================================================
    # START
    # ==========================================================

    async def start_booking(
        message: Message,
        state: FSMContext,
        provider_id: str,
        user: UserIdentity,
        lang: str,
    ) -> BookingSession:
        """Точка входа в сценарий записи."""
        chat_id = message.chat.id
        logger.info(f"[BOOKING] Starting for chat_id={chat_id}, provider={provider_id or '-'}")

        drop_session(chat_id)

        today = date.today()
        session = BookingSession(
            bot=message.bot,
            chat_id=chat_id,
            lang=lang,
            calendar_month=today.replace(day=1),
        )
        controller = SchedulingController(
            client,
            TelegramNavigator(session),
            user=user,
            auto_close_on_select=auto_close_on_select,
            submit_timeout=submit_timeout,
            on_change=lambda _: render(session),
            today=today,
        )
        session.controller = controller
        _sessions[chat_id] = session

        controller.initialize(provider_id)

        sent = await message.answer(
            text=booking_text(controller.state, user.name, lang),
            reply_markup=booking_inline(controller.state, lang, session.calendar_month, today),
        )
        session.message_id = sent.message_id

        # fetches may have finished while the message was being sent
        await render(session)
        await state.set_state(ClientBooking.active)
        return session

    @router.message(Command("book"))
    async def handle_book_command(message: Message, command: CommandObject, state: FSMContext):
        provider_id = (command.args or "").strip()
        await start_booking(
            message,
            state,
            provider_id,
            identity_from_user(message.from_user),
            resolve_lang(message.from_user.language_code),
        )

    @router.callback_query(F.data.startswith("book:start:"))
    async def handle_book_start(callback: CallbackQuery, state: FSMContext):
        provider_id = callback.data.split(":", 2)[-1]
        await start_booking(
            callback.message,
            state,
            provider_id,
            identity_from_user(callback.from_user),
            resolve_lang(callback.from_user.language_code),
        )
        await callback.answer()

    # ==========================================================
    # SESSION HELPERS
    # ==========================================================

    async def active_session(callback: CallbackQuery, state: FSMContext) -> Optional[BookingSession]:
        session = get_session(callback.message.chat.id)
        if (
            session is None
            or session.controller is None
            or not session.controller.active
            or session.message_id != callback.message.message_id
        ):
            lang = resolve_lang(callback.from_user.language_code)
            await callback.answer(t("booking:session_expired", lang), show_alert=True)
            await state.clear()
            return None
        return session

    # ==========================================================
    # PROVIDER / DATE
    # ==========================================================

    @router.callback_query(ClientBooking.active, F.data.startswith("book:prov:"))
    async def handle_provider_select(callback: CallbackQuery, state: FSMContext):
        session = await active_session(callback, state)
        if not session:
            return
        session.controller.select_provider(callback.data.split(":", 2)[-1])
        await render(session)
        await callback.answer()

    @router.callback_query(ClientBooking.active, F.data == "book:cal")
    async def handle_date_picker_toggle(callback: CallbackQuery, state: FSMContext):
        session = await active_session(callback, state)
        if not session:
            return
        controller = session.controller
        controller.toggle_date_picker()
        if controller.state.is_date_picker_open:
            session.calendar_month = controller.state.selected_date.replace(day=1)
        await render(session)
        await callback.answer()

    @router.callback_query(ClientBooking.active, F.data.startswith("book:cal_month:"))
    async def handle_calendar_month(callback: CallbackQuery, state: FSMContext):
        session = await active_session(callback, state)
        if not session:
            return
        year, month = callback.data.split(":")[-1].split("-")
        session.calendar_month = date(int(year), int(month), 1)
        await render(session)
        await callback.answer()

    @router.callback_query(ClientBooking.active, F.data.startswith("book:day:"))
    async def handle_day_select(callback: CallbackQuery, state: FSMContext):
        session = await active_session(callback, state)
        if not session:
            return
        try:
            value = date.fromisoformat(callback.data.split(":")[-1])
        except ValueError:
            value = None
        session.controller.select_date(value)
        await render(session)
        await callback.answer()

    # ==========================================================
    # HOUR
    # ==========================================================

    @router.callback_query(ClientBooking.active, F.data.startswith("book:hour:"))
    async def handle_hour_select(callback: CallbackQuery, state: FSMContext):
        session = await active_session(callback, state)
        if not session:
            return
        hour = int(callback.data.split(":")[-1])
        if not session.controller.select_hour(hour):
            await callback.answer(t("booking:hour_unavailable", session.lang), show_alert=True)
            return
        await render(session)
        await callback.answer()

    # ==========================================================
    # SUBMIT
    # ==========================================================

    @router.callback_query(ClientBooking.active, F.data == "book:submit")
    async def handle_submit(callback: CallbackQuery, state: FSMContext):
        session = await active_session(callback, state)
        if not session:
            return
        lang = session.lang

        if session.controller.state.phase is Phase.SUBMITTING:
            await callback.answer(t("booking:submit_busy", lang))
            return

        try:
            await session.controller.submit()
        except ValidationError as e:
            logger.warning(f"[BOOKING] Submit rejected: {e}")
            await callback.answer(t("booking:incomplete", lang), show_alert=True)
            return
        except SubmissionError:
            await render(session)
            await callback.answer(t("booking:submit_error", lang), show_alert=True)
            return

        await state.clear()
        await callback.answer(t("booking:created_alert", lang), show_alert=True)

    # ==========================================================
    # BACK / NOOP
    # ==========================================================

    @router.callback_query(ClientBooking.active, F.data == "book:back")
    async def handle_back(callback: CallbackQuery, state: FSMContext):
        session = await active_session(callback, state)
        if not session:
            return
        await session.controller.cancel()
        await state.clear()
        await callback.answer()

    @router.callback_query(F.data == "book:noop")
    async def handle_noop(callback: CallbackQuery):
        await callback.answer()

    @router.callback_query(F.data.startswith("book:"))
    async def handle_expired(callback: CallbackQuery, state: FSMContext):
        """Кнопка старого сообщения без активной сессии."""
        lang = resolve_lang(callback.from_user.language_code)
        await callback.answer(t("booking:session_expired", lang), show_alert=True)
        await state.clear()

    router.start_booking = start_booking
    return router
