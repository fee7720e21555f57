"""
barber_bot/app/scheduling/errors.py

Ошибки сценария записи.

- FetchError: не удалось получить список мастеров или слоты (не фатально)
- ValidationError: попытка отправки без полного выбора
- SubmissionError: сервер отклонил запись / сеть / таймаут (можно повторить)
"""


class SchedulingError(Exception):
    """Base error of the scheduling flow."""


class FetchError(SchedulingError):
    """Provider list or day availability could not be loaded."""

    def __init__(self, what: str, reason: str = ""):
        self.what = what
        self.reason = reason
        super().__init__(f"{what} fetch failed: {reason}" if reason else f"{what} fetch failed")


class ValidationError(SchedulingError):
    """Operation is not allowed for the current selection."""


class SubmissionError(SchedulingError):
    """Appointment could not be created."""

    retryable = True

    def __init__(self, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)
