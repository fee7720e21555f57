# barber_bot/app/scheduling/submission.py
"""
Отправка записи.

1. Проверка выбора (мастер + час)
2. datetime = selected_date (Y/M/D) + selected_hour:00:00
3. POST /appointments
4. Ошибка → SubmissionError, без автоматического повтора
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from .errors import SubmissionError, ValidationError
from .models import AppointmentCreated, AppointmentRequest
from .ports import AvailabilityClient
from .state import SchedulingState

logger = logging.getLogger(__name__)


def build_appointment_request(state: SchedulingState) -> AppointmentRequest:
    """Compose the request from the current selection."""
    if not state.selected_provider_id:
        raise ValidationError("provider is not selected")

    if state.selected_hour is None:
        raise ValidationError("hour is not selected")

    d = state.selected_date
    return AppointmentRequest(
        provider_id=state.selected_provider_id,
        date=datetime(d.year, d.month, d.day, state.selected_hour, 0, 0),
    )


async def send_appointment(
    client: AvailabilityClient,
    request: AppointmentRequest,
    timeout: Optional[float] = None,
) -> AppointmentCreated:
    """
    Single attempt to create the appointment.

    Raises:
        SubmissionError: client failure or no answer within ``timeout`` seconds.
    """
    try:
        return await asyncio.wait_for(
            client.create_appointment(request.provider_id, request.date),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.error(f"[BOOKING] Submit timed out after {timeout}s: {request.date.isoformat()}")
        raise SubmissionError("timeout")
    except SubmissionError:
        raise
    except Exception as e:
        logger.error(f"[BOOKING] Submit failed: provider={request.provider_id} -> {e}")
        raise SubmissionError(str(e), status_code=getattr(e, "status_code", None)) from e
