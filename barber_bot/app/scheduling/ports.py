# barber_bot/app/scheduling/ports.py
"""
Collaborators the scheduling core depends on.

Implementations:
- AvailabilityClient → barber_bot.app.utils.api.ApiClient
- Navigator → barber_bot.app.flows.client.booking.TelegramNavigator
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from .models import AppointmentCreated, AvailabilityItem, Provider

APPOINTMENT_CREATED = "AppointmentCreated"


@runtime_checkable
class AvailabilityClient(Protocol):
    """Remote scheduling API."""

    async def list_providers(self) -> list[Provider]:
        """GET /providers"""
        ...

    async def get_day_availability(
        self,
        provider_id: str,
        year: int,
        month: int,
        day: int,
    ) -> list[AvailabilityItem]:
        """GET /providers/{provider_id}/day-availability (month is 1-based)."""
        ...

    async def create_appointment(self, provider_id: str, date: datetime) -> AppointmentCreated:
        """POST /appointments"""
        ...


@runtime_checkable
class Navigator(Protocol):
    """Exit points of the scheduling screen."""

    async def go_back(self) -> None:
        ...

    async def complete_with(self, screen: str, payload: dict[str, Any]) -> None:
        ...
