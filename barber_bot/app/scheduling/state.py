# barber_bot/app/scheduling/state.py
"""
Состояние одной сессии записи.

Мутируется только через SchedulingController.
"""

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .errors import FetchError, SchedulingError
from .models import AppointmentCreated, AvailabilityItem, AvailabilitySlot, Provider
from .slots import PartitionedSlots, partition_availability


class Phase(str, enum.Enum):
    IDLE = "idle"
    PROVIDERS_LOADING = "providers_loading"
    READY = "ready"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


@dataclass
class SchedulingState:
    selected_provider_id: str = ""
    selected_date: date = field(default_factory=date.today)
    selected_hour: Optional[int] = None

    providers: list[Provider] = field(default_factory=list)
    availability: list[AvailabilityItem] = field(default_factory=list)

    is_date_picker_open: bool = False
    availability_loading: bool = False
    phase: Phase = Phase.IDLE

    last_error: Optional[SchedulingError] = None
    fetch_errors: dict[str, FetchError] = field(default_factory=dict)
    created: Optional[AppointmentCreated] = None

    _partition: PartitionedSlots = field(
        default_factory=lambda: PartitionedSlots([], []),
        init=False,
        repr=False,
    )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def morning_availability(self) -> list[AvailabilitySlot]:
        return self._partition.morning

    @property
    def afternoon_availability(self) -> list[AvailabilitySlot]:
        return self._partition.afternoon

    @property
    def selected_provider(self) -> Optional[Provider]:
        return next(
            (p for p in self.providers if p.id == self.selected_provider_id),
            None,
        )

    def selection_key(self) -> tuple[str, date]:
        """(provider_id, calendar day) the availability must belong to."""
        d = self.selected_date
        return self.selected_provider_id, date(d.year, d.month, d.day)

    def is_hour_available(self, hour: int) -> bool:
        return any(item.hour == hour and item.available for item in self.availability)

    # ------------------------------------------------------------------
    # Mutations (controller only)
    # ------------------------------------------------------------------

    def replace_availability(self, items: list[AvailabilityItem]) -> None:
        """Replace the whole availability set and recompute partitions."""
        self.availability = list(items)
        self._partition = partition_availability(self.availability)

    def reset_selection(self) -> None:
        """Provider or date changed: drop hour and stale availability."""
        self.selected_hour = None
        self.replace_availability([])

    def report_fetch_error(self, error: FetchError) -> None:
        """Keep one notice per fetch source."""
        self.fetch_errors[error.what] = error
        self.last_error = error

    def clear_fetch_error(self, what: str) -> None:
        error = self.fetch_errors.pop(what, None)
        if error is not None and self.last_error is error:
            self.last_error = None
