from datetime import date, datetime

from barber_bot.app.i18n.loader import t
from barber_bot.app.keyboards.booking import (
    NOOP,
    booking_inline,
    booking_text,
    calendar_rows,
    created_text,
    providers_list_inline,
)
from barber_bot.app.scheduling.errors import FetchError
from barber_bot.app.scheduling.models import AvailabilityItem, Provider
from barber_bot.app.scheduling.state import Phase, SchedulingState


def make_state(**kwargs) -> SchedulingState:
    state = SchedulingState(
        selected_provider_id="p1",
        selected_date=date(2024, 5, 10),
        providers=[Provider(id="p1", name="Ana"), Provider(id="p2", name="Bruno")],
        phase=Phase.READY,
        **kwargs,
    )
    state.replace_availability([
        AvailabilityItem(hour=14, available=False),
        AvailabilityItem(hour=9, available=True),
    ])
    return state


def buttons(markup):
    return [b for row in markup.inline_keyboard for b in row]


def by_text(markup):
    return {b.text: b.callback_data for b in buttons(markup)}


def test_slot_grid_sections_and_inert_unavailable_hour():
    kb = booking_inline(make_state(), "en", date(2024, 5, 1), date(2024, 5, 1))
    labels = by_text(kb)

    assert labels["Morning"] == NOOP
    assert labels["Afternoon"] == NOOP
    assert labels["09:00"] == "book:hour:9"
    assert labels["·14:00"] == NOOP
    assert "book:submit" not in labels.values()
    assert labels["✅ Ana"] == "book:prov:p1"
    assert labels["Bruno"] == "book:prov:p2"
    assert labels[t("booking:date_button", "en") % "10.05.2024"] == "book:cal"
    assert labels[t("common:back", "en")] == "book:back"


def test_selected_hour_is_marked_and_submit_shown():
    kb = booking_inline(make_state(selected_hour=9), "en", date(2024, 5, 1), date(2024, 5, 1))
    labels = by_text(kb)

    assert labels["✅09:00"] == "book:hour:9"
    assert labels[t("booking:submit", "en")] == "book:submit"


def test_empty_sections_are_hidden():
    state = make_state()
    state.replace_availability([AvailabilityItem(hour=9, available=True)])
    labels = by_text(booking_inline(state, "en", date(2024, 5, 1), date(2024, 5, 1)))

    assert "Morning" in labels
    assert "Afternoon" not in labels


def test_calendar_only_when_open():
    closed = by_text(booking_inline(make_state(), "en", date(2024, 5, 1), date(2024, 5, 1)))
    assert "book:day:2024-05-20" not in closed.values()

    opened = by_text(
        booking_inline(make_state(is_date_picker_open=True), "en", date(2024, 5, 1), date(2024, 5, 1))
    )
    assert "book:day:2024-05-20" in opened.values()


def test_calendar_rows():
    rows = calendar_rows(date(2024, 5, 1), date(2024, 5, 10), date(2024, 5, 8), "en")
    flat = [b for row in rows for b in row]
    labels = {b.text: b.callback_data for b in flat}

    assert rows[0][0].callback_data == "book:cal_month:2024-04"
    assert rows[0][1].text == "May 2024"
    assert rows[0][2].callback_data == "book:cal_month:2024-06"
    assert [b.text for b in rows[1]] == ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]

    # past days are inert
    assert labels["·7"] == NOOP
    assert labels["8"] == "book:day:2024-05-08"
    assert labels["[10]"] == "book:day:2024-05-10"
    assert labels["31"] == "book:day:2024-05-31"
    assert all(len(row) == 7 for row in rows[1:])


def test_calendar_year_boundary():
    rows = calendar_rows(date(2024, 12, 1), date(2024, 12, 3), date(2024, 12, 1), "en")
    assert rows[0][0].callback_data == "book:cal_month:2024-11"
    assert rows[0][2].callback_data == "book:cal_month:2025-01"


def test_booking_text_reports_fetch_error():
    state = make_state()
    state.replace_availability([])
    state.report_fetch_error(FetchError("availability", "502"))

    text = booking_text(state, "Maria", "en")

    assert t("booking:user", "en") % "Maria" in text
    assert t("booking:fetch_error:availability", "en") in text
    assert t("booking:no_slots", "en") in text


def test_booking_text_keeps_providers_error_after_slots_load():
    state = make_state()
    state.providers = []
    state.report_fetch_error(FetchError("providers", "502"))
    state.clear_fetch_error("availability")

    text = booking_text(state, None, "en")

    assert t("booking:fetch_error:providers", "en") in text
    assert t("booking:choose_time", "en") in text


def test_booking_text_empty_provider_list():
    state = SchedulingState(phase=Phase.READY)
    text = booking_text(state, None, "en")
    assert t("booking:no_providers", "en") in text


def test_booking_text_loading():
    state = SchedulingState(phase=Phase.PROVIDERS_LOADING, selected_provider_id="p1", availability_loading=True)
    text = booking_text(state, None, "pt")

    assert t("booking:title", "pt") in text
    assert t("booking:providers_loading", "pt") in text
    assert t("booking:slots_loading", "pt") in text


def test_created_text():
    text = created_text(datetime(2024, 5, 10, 9), "en")
    assert text.endswith("\n\nFriday, 10.05.2024 at 09:00")
    assert "Sexta-feira" in created_text(datetime(2024, 5, 10, 9), "pt")


def test_providers_list_inline():
    kb = providers_list_inline([Provider(id="p1", name="Ana")], "en")
    assert list(by_text(kb).values()) == ["book:start:p1"]

    empty = providers_list_inline([], "en")
    assert by_text(empty) == {t("dashboard:no_providers", "en"): NOOP}
