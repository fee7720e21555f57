from datetime import date, datetime

from barber_bot.app.scheduling.models import AvailabilityItem, Provider
from barber_bot.app.scheduling.state import Phase, SchedulingState


def test_defaults():
    state = SchedulingState()
    assert state.phase is Phase.IDLE
    assert state.selected_hour is None
    assert state.selected_date == date.today()
    assert state.morning_availability == []
    assert state.afternoon_availability == []


def test_selection_key_ignores_time_of_day():
    state = SchedulingState(selected_provider_id="p1", selected_date=datetime(2024, 5, 10, 16, 45))
    assert state.selection_key() == ("p1", date(2024, 5, 10))


def test_replace_availability_recomputes_partitions():
    state = SchedulingState()
    state.replace_availability([
        AvailabilityItem(hour=13, available=True),
        AvailabilityItem(hour=10, available=False),
    ])
    assert [s.hour_formatted for s in state.morning_availability] == ["10:00"]
    assert [s.hour_formatted for s in state.afternoon_availability] == ["13:00"]

    state.replace_availability([AvailabilityItem(hour=8, available=True)])
    assert [s.hour for s in state.morning_availability] == [8]
    assert state.afternoon_availability == []


def test_is_hour_available():
    state = SchedulingState()
    state.replace_availability([
        AvailabilityItem(hour=9, available=True),
        AvailabilityItem(hour=14, available=False),
    ])
    assert state.is_hour_available(9)
    assert not state.is_hour_available(14)
    assert not state.is_hour_available(10)


def test_reset_selection_clears_hour_and_availability():
    state = SchedulingState(selected_hour=9)
    state.replace_availability([AvailabilityItem(hour=9, available=True)])

    state.reset_selection()

    assert state.selected_hour is None
    assert state.availability == []
    assert state.morning_availability == []


def test_selected_provider():
    ana = Provider(id="p1", name="Ana")
    state = SchedulingState(selected_provider_id="p1", providers=[ana])
    assert state.selected_provider == ana

    state.selected_provider_id = "missing"
    assert state.selected_provider is None
