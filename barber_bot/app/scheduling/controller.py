# barber_bot/app/scheduling/controller.py
"""
SchedulingController: единственная точка изменения SchedulingState.

Flow:
1. initialize(provider_id) → список мастеров (один раз) + слоты
2. select_provider / select_date → новый запрос слотов
3. select_hour → только свободный час
4. submit → POST /appointments → complete_with("AppointmentCreated")

Fetches run as asyncio tasks. Every availability request carries a token
(sequence, provider_id, day); a result is applied only while that token is
the latest one and still matches the current selection. Older results are
dropped.
"""

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, NamedTuple, Optional

from .errors import FetchError, SubmissionError, ValidationError
from .models import AppointmentCreated, UserIdentity
from .ports import APPOINTMENT_CREATED, AvailabilityClient, Navigator
from .state import Phase, SchedulingState
from .submission import build_appointment_request, send_appointment

logger = logging.getLogger(__name__)

ChangeListener = Callable[["SchedulingController"], Awaitable[None]]


class AvailabilityToken(NamedTuple):
    seq: int
    provider_id: str
    day: date


class SchedulingController:

    def __init__(
        self,
        client: AvailabilityClient,
        navigator: Navigator,
        *,
        user: Optional[UserIdentity] = None,
        auto_close_on_select: bool = True,
        submit_timeout: Optional[float] = None,
        on_change: Optional[ChangeListener] = None,
        today: Optional[date] = None,
    ):
        self.client = client
        self.navigator = navigator
        self.user = user
        self.auto_close_on_select = auto_close_on_select
        self.submit_timeout = submit_timeout
        self.on_change = on_change

        self.state = SchedulingState(selected_date=today or date.today())

        self._active = True
        self._providers_done = False
        self._seq = 0
        self._latest: Optional[AvailabilityToken] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        return self._active

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, provider_id: str) -> None:
        """Start the session: load providers once and the first day's slots."""
        if self.state.phase is not Phase.IDLE:
            raise ValidationError("session already initialized")

        logger.info(f"[BOOKING] Session start: provider={provider_id or '-'}")

        self.state.selected_provider_id = provider_id or ""
        self.state.phase = Phase.PROVIDERS_LOADING
        self._spawn(self._load_providers())

        if self.state.selected_provider_id:
            self._refresh_availability()

    def close(self) -> None:
        """Leave the flow. Pending fetches still finish but change nothing."""
        if self._active:
            logger.info(f"[BOOKING] Session closed: phase={self.state.phase.value}")
        self._active = False

    async def cancel(self) -> None:
        self.close()
        await self.navigator.go_back()

    async def wait_idle(self) -> None:
        """Wait until every in-flight fetch has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def select_provider(self, provider_id: str) -> None:
        if not provider_id or provider_id == self.state.selected_provider_id:
            return

        logger.info(f"[BOOKING] Provider: {provider_id}")
        self.state.selected_provider_id = provider_id
        self._refresh_availability()

    def select_date(self, value: Optional[date]) -> None:
        """
        Date picker commit. ``None`` means the picker reported no change.
        """
        if self.auto_close_on_select:
            self.state.is_date_picker_open = False

        if value is None:
            return

        _, previous_day = self.state.selection_key()
        self.state.selected_date = value

        if date(value.year, value.month, value.day) != previous_day:
            logger.info(f"[BOOKING] Day: {value.isoformat()}")
            self._refresh_availability()

    def toggle_date_picker(self) -> None:
        self.state.is_date_picker_open = not self.state.is_date_picker_open

    def select_hour(self, hour: int) -> bool:
        """
        Select an hour. Hours that are missing or not available are ignored.
        """
        if not self.state.is_hour_available(hour):
            logger.warning(f"[BOOKING] Hour {hour} is not available, ignored")
            return False

        self.state.selected_hour = hour
        return True

    async def submit(self) -> AppointmentCreated:
        """
        Create the appointment for the current selection.

        Raises:
            ValidationError: incomplete selection or submission already running.
            SubmissionError: backend rejected the request; selection is kept.
        """
        if not self._active or self.state.phase in (Phase.SUBMITTING, Phase.SUBMITTED):
            raise ValidationError(f"cannot submit in phase {self.state.phase.value}")

        request = build_appointment_request(self.state)

        self.state.phase = Phase.SUBMITTING
        self.state.last_error = None
        logger.info(f"[BOOKING] Creating: provider={request.provider_id}, date={request.date.isoformat()}")

        try:
            created = await send_appointment(self.client, request, timeout=self.submit_timeout)
        except SubmissionError as e:
            self.state.phase = Phase.READY if self._providers_done else Phase.PROVIDERS_LOADING
            self.state.last_error = e
            raise

        self.state.phase = Phase.SUBMITTED
        self.state.created = created
        logger.info(f"[BOOKING] Created: id={created.id}")

        self.close()
        await self.navigator.complete_with(APPOINTMENT_CREATED, {"date": request.date})
        return created

    # ------------------------------------------------------------------
    # Fetches
    # ------------------------------------------------------------------

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _load_providers(self) -> None:
        try:
            providers = await self.client.list_providers()
        except Exception as e:
            if not self._active:
                return
            logger.error(f"[BOOKING] Providers fetch failed: {e}")
            self.state.providers = []
            self.state.report_fetch_error(FetchError("providers", str(e)))
        else:
            if not self._active:
                logger.debug("[BOOKING] Providers arrived after session close, dropped")
                return
            self.state.providers = list(providers)

        self._providers_done = True
        if self.state.phase is Phase.PROVIDERS_LOADING:
            self.state.phase = Phase.READY
        await self._notify()

    def _refresh_availability(self) -> None:
        self.state.reset_selection()

        provider_id, day = self.state.selection_key()
        if not provider_id:
            self._latest = None
            self.state.availability_loading = False
            return

        self._seq += 1
        token = AvailabilityToken(self._seq, provider_id, day)
        self._latest = token
        self.state.availability_loading = True
        self._spawn(self._load_availability(token))

    def _is_current(self, token: AvailabilityToken) -> bool:
        return (
            self._active
            and token == self._latest
            and (token.provider_id, token.day) == self.state.selection_key()
        )

    async def _load_availability(self, token: AvailabilityToken) -> None:
        try:
            items = await self.client.get_day_availability(
                token.provider_id,
                token.day.year,
                token.day.month,
                token.day.day,
            )
        except Exception as e:
            if not self._is_current(token):
                logger.debug(f"[BOOKING] Stale availability error dropped: {token}")
                return
            logger.error(f"[BOOKING] Availability fetch failed: {token.provider_id} {token.day} -> {e}")
            self.state.replace_availability([])
            self.state.report_fetch_error(FetchError("availability", str(e)))
        else:
            if not self._is_current(token):
                logger.debug(f"[BOOKING] Stale availability dropped: {token}")
                return
            self.state.replace_availability(items)
            self.state.clear_fetch_error("availability")

        self.state.availability_loading = False
        await self._notify()

    async def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            await self.on_change(self)
        except Exception:
            logger.exception("[BOOKING] Change listener failed")
