"""Pytest configuration and fixtures."""

import asyncio
from datetime import date, datetime

import pytest

from barber_bot.app.scheduling.controller import SchedulingController
from barber_bot.app.scheduling.models import (
    AppointmentCreated,
    AvailabilityItem,
    Provider,
    UserIdentity,
)

DAY = date(2024, 5, 10)
NEXT_DAY = date(2024, 5, 11)


class FakeClient:
    """In-memory AvailabilityClient with per-call gates."""

    def __init__(self, providers=None, availability=None):
        self.providers = providers or []
        self.availability = availability or {}
        self.by_call: dict[int, list] = {}
        self.gates: dict[int, asyncio.Event] = {}
        self.errors: dict[int, Exception] = {}

        self.providers_gate: asyncio.Event | None = None
        self.providers_error: Exception | None = None
        self.provider_calls = 0

        self.availability_calls: list[tuple[str, date]] = []

        self.create_calls: list[tuple[str, datetime]] = []
        self.create_error: Exception | None = None
        self.create_gate: asyncio.Event | None = None

    def hold(self, call_index: int) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[call_index] = gate
        return gate

    async def list_providers(self):
        self.provider_calls += 1
        if self.providers_gate:
            await self.providers_gate.wait()
        if self.providers_error:
            raise self.providers_error
        return list(self.providers)

    async def get_day_availability(self, provider_id, year, month, day):
        index = len(self.availability_calls)
        key = (provider_id, date(year, month, day))
        self.availability_calls.append(key)

        gate = self.gates.get(index)
        if gate:
            await gate.wait()
        if index in self.errors:
            raise self.errors[index]
        if index in self.by_call:
            return list(self.by_call[index])
        return list(self.availability.get(key, []))

    async def create_appointment(self, provider_id, date):
        self.create_calls.append((provider_id, date))
        if self.create_gate:
            await self.create_gate.wait()
        if self.create_error:
            raise self.create_error
        return AppointmentCreated(id="a1", date=date, provider_id=provider_id)


class FakeNavigator:

    def __init__(self):
        self.calls: list[tuple] = []

    async def go_back(self):
        self.calls.append(("go_back",))

    async def complete_with(self, screen, payload):
        self.calls.append(("complete_with", screen, payload))


def items(*pairs) -> list[AvailabilityItem]:
    return [AvailabilityItem(hour=h, available=a) for h, a in pairs]


@pytest.fixture
def providers() -> list[Provider]:
    return [
        Provider(id="p1", name="Ana", avatar_url="https://cdn.example/ana.png"),
        Provider(id="p2", name="Bruno", avatar_url="https://cdn.example/bruno.png"),
    ]


@pytest.fixture
def client(providers) -> FakeClient:
    return FakeClient(
        providers=providers,
        availability={
            ("p1", DAY): items((9, True), (14, False)),
            ("p1", NEXT_DAY): items((10, True), (15, True)),
            ("p2", DAY): items((8, True), (13, True), (17, False)),
        },
    )


@pytest.fixture
def navigator() -> FakeNavigator:
    return FakeNavigator()


@pytest.fixture
def make_controller(client, navigator):
    def _make(**kwargs) -> SchedulingController:
        kwargs.setdefault("today", DAY)
        kwargs.setdefault("user", UserIdentity(name="Maria"))
        return SchedulingController(client, navigator, **kwargs)
    return _make


@pytest.fixture
async def ready_controller(make_controller):
    """Session for p1 on DAY with providers and availability loaded."""
    controller = make_controller()
    controller.initialize("p1")
    await controller.wait_idle()
    return controller
