# barber_bot/app/keyboards/booking.py
"""
Inline-клавиатуры экрана записи.

Layout:
    [мастер 1] [мастер 2] ...
    [📅 10.05.2024]
    (календарь, если открыт)
    Morning:   [09:00] [10:00] [·11:00]
    Afternoon: [14:00] ...
    [✅ Schedule]
    [⬅️ Back]

Unavailable hours are rendered with the noop callback.
"""

import calendar
from datetime import date, datetime, timedelta

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from barber_bot.app.i18n.loader import t
from barber_bot.app.scheduling.models import AvailabilitySlot, Provider
from barber_bot.app.scheduling.state import Phase, SchedulingState

NOOP = "book:noop"
SLOTS_PER_ROW = 4

DAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


def day_name(day: str, lang: str) -> str:
    return t(f"day:{day}", lang)


def format_date(d: date) -> str:
    return d.strftime("%d.%m.%Y")


# ==============================================================
# Dashboard
# ==============================================================

def providers_list_inline(providers: list[Provider], lang: str) -> InlineKeyboardMarkup:
    """Список мастеров на главном экране."""
    if not providers:
        return InlineKeyboardMarkup(inline_keyboard=[
            [InlineKeyboardButton(text=t("dashboard:no_providers", lang), callback_data=NOOP)]
        ])

    buttons = [
        [InlineKeyboardButton(text=f"✂️ {p.name}", callback_data=f"book:start:{p.id}")]
        for p in providers
    ]
    return InlineKeyboardMarkup(inline_keyboard=buttons)


# ==============================================================
# Booking screen
# ==============================================================

def providers_rows(state: SchedulingState) -> list[list[InlineKeyboardButton]]:
    rows = []
    for p in state.providers:
        mark = "✅ " if p.id == state.selected_provider_id else ""
        rows.append([InlineKeyboardButton(text=f"{mark}{p.name}", callback_data=f"book:prov:{p.id}")])
    return rows


def calendar_rows(month: date, selected: date, today: date, lang: str) -> list[list[InlineKeyboardButton]]:
    """Month grid. Days before ``today`` are inert."""
    prev_month = (month.replace(day=1) - timedelta(days=1)).replace(day=1)
    next_month = (month.replace(day=28) + timedelta(days=4)).replace(day=1)

    rows: list[list[InlineKeyboardButton]] = [[
        InlineKeyboardButton(text="◀️", callback_data=f"book:cal_month:{prev_month:%Y-%m}"),
        InlineKeyboardButton(text=f"{t(f'month:{month.month}', lang)} {month.year}", callback_data=NOOP),
        InlineKeyboardButton(text="▶️", callback_data=f"book:cal_month:{next_month:%Y-%m}"),
    ]]
    rows.append([InlineKeyboardButton(text=day_name(d, lang), callback_data=NOOP) for d in DAYS])

    selected_day = date(selected.year, selected.month, selected.day)

    for week in calendar.Calendar(firstweekday=0).monthdatescalendar(month.year, month.month):
        row = []
        for d in week:
            if d.month != month.month or d < today:
                text = " " if d.month != month.month else f"·{d.day}"
                row.append(InlineKeyboardButton(text=text, callback_data=NOOP))
            elif d == selected_day:
                row.append(InlineKeyboardButton(text=f"[{d.day}]", callback_data=f"book:day:{d.isoformat()}"))
            else:
                row.append(InlineKeyboardButton(text=str(d.day), callback_data=f"book:day:{d.isoformat()}"))
        rows.append(row)

    return rows


def slot_button(slot: AvailabilitySlot, selected_hour: int | None) -> InlineKeyboardButton:
    if not slot.available:
        return InlineKeyboardButton(text=f"·{slot.hour_formatted}", callback_data=NOOP)
    mark = "✅" if slot.hour == selected_hour else ""
    return InlineKeyboardButton(text=f"{mark}{slot.hour_formatted}", callback_data=f"book:hour:{slot.hour}")


def slots_section(
    title: str,
    slots: list[AvailabilitySlot],
    selected_hour: int | None,
) -> list[list[InlineKeyboardButton]]:
    if not slots:
        return []

    rows = [[InlineKeyboardButton(text=title, callback_data=NOOP)]]
    for i in range(0, len(slots), SLOTS_PER_ROW):
        rows.append([slot_button(s, selected_hour) for s in slots[i:i + SLOTS_PER_ROW]])
    return rows


def booking_inline(
    state: SchedulingState,
    lang: str,
    calendar_month: date,
    today: date,
) -> InlineKeyboardMarkup:
    """Клавиатура экрана записи по текущему состоянию."""
    buttons = providers_rows(state)

    buttons.append([
        InlineKeyboardButton(
            text=t("booking:date_button", lang) % format_date(state.selected_date),
            callback_data="book:cal",
        )
    ])

    if state.is_date_picker_open:
        buttons.extend(calendar_rows(calendar_month, state.selected_date, today, lang))

    buttons.extend(slots_section(t("booking:morning", lang), state.morning_availability, state.selected_hour))
    buttons.extend(slots_section(t("booking:afternoon", lang), state.afternoon_availability, state.selected_hour))

    if state.selected_hour is not None:
        buttons.append([InlineKeyboardButton(text=t("booking:submit", lang), callback_data="book:submit")])

    buttons.append([InlineKeyboardButton(text=t("common:back", lang), callback_data="book:back")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def booking_text(state: SchedulingState, user_name: str | None, lang: str) -> str:
    """Шапка экрана записи + подсказка по текущему шагу."""
    lines = [t("booking:title", lang)]
    if user_name:
        lines.append(t("booking:user", lang) % user_name)
    lines.append("")

    for what in ("providers", "availability"):
        if what in state.fetch_errors:
            lines.append(t(f"booking:fetch_error:{what}", lang))

    if not state.providers:
        if state.phase is Phase.PROVIDERS_LOADING:
            lines.append(t("booking:providers_loading", lang))
        elif "providers" not in state.fetch_errors:
            lines.append(t("booking:no_providers", lang))
    elif not state.selected_provider_id:
        lines.append(t("booking:provider_prompt", lang))

    if state.is_date_picker_open:
        lines.append(t("booking:choose_date", lang))

    if state.selected_provider_id:
        if state.availability_loading:
            lines.append(t("booking:slots_loading", lang))
        elif not state.availability:
            lines.append(t("booking:no_slots", lang))
        else:
            lines.append(t("booking:choose_time", lang))

    if state.phase is Phase.SUBMITTING:
        lines.append(t("booking:submitting", lang))

    return "\n".join(lines)


def created_text(value: datetime, lang: str) -> str:
    """Экран «запись создана»."""
    weekday = t(f"day:{DAYS[value.weekday()]}:full", lang)
    return t("booking:created", lang) % (weekday, format_date(value), value.strftime("%H:%M"))

