# barber_bot/app/scheduling/slots.py
"""
Morning / afternoon split of a day's hourly availability.

    [{"hour": 14, ...}, {"hour": 9, ...}]
        → morning:   [09:00]
        → afternoon: [14:00]
"""

from typing import Iterable, NamedTuple

from .models import AvailabilityItem, AvailabilitySlot

# First afternoon hour
NOON = 12


class PartitionedSlots(NamedTuple):
    morning: list[AvailabilitySlot]
    afternoon: list[AvailabilitySlot]


def format_hour(hour: int) -> str:
    """9 → "09:00"."""
    return f"{hour:02d}:00"


def to_slot(item: AvailabilityItem) -> AvailabilitySlot:
    return AvailabilitySlot(
        hour=item.hour,
        available=item.available,
        hour_formatted=format_hour(item.hour),
    )


def partition_availability(items: Iterable[AvailabilityItem]) -> PartitionedSlots:
    """
    Split availability into morning (hour < 12) and afternoon (hour >= 12).

    Both halves are sorted by hour. Empty input gives two empty lists.
    """
    ordered = sorted(items, key=lambda item: item.hour)

    morning = [to_slot(item) for item in ordered if item.hour < NOON]
    afternoon = [to_slot(item) for item in ordered if item.hour >= NOON]

    return PartitionedSlots(morning=morning, afternoon=afternoon)
