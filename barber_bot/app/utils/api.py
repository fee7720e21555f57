"""
barber_bot/app/utils/api.py

HTTP-клиент API записи.

Бот → Backend (API_URL)

Ошибки не глотаются: любая неудача → ApiError, дальше решает сценарий.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx
import pydantic

from barber_bot.app.config import API_TOKEN, API_URL, REQUEST_TIMEOUT
from barber_bot.app.scheduling.models import (
    AppointmentCreated,
    AppointmentRequest,
    AvailabilityItem,
    Provider,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Failed API call."""

    def __init__(self, method: str, path: str, status_code: Optional[int] = None, detail: str = ""):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.detail = detail
        status = status_code if status_code is not None else "-"
        super().__init__(f"{method} {path} -> {status} {detail}".strip())


class ApiClient:
    """Асинхронный клиент API записи."""

    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = API_TOKEN,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        headers: dict = None,
        **kwargs
    ) -> Optional[dict | list]:
        """Базовый HTTP запрос."""
        url = f"{self.base_url}{path}"

        _headers = {"Accept": "application/json"}
        if self.token:
            _headers["Authorization"] = f"Bearer {self.token}"
        if headers:
            _headers.update(headers)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                resp = await client.request(method, url, headers=_headers, **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"API request failed: {method} {path} -> {e!r}")
                raise ApiError(method, path, detail=str(e) or type(e).__name__) from e

        if resp.status_code == 204:
            return None

        if resp.status_code >= 400:
            detail = _error_detail(resp)
            logger.error(f"API error: {method} {path} -> {resp.status_code} {detail}")
            raise ApiError(method, path, resp.status_code, detail)

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"API invalid JSON: {method} {path}")
            raise ApiError(method, path, resp.status_code, "invalid JSON") from e

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    async def list_providers(self) -> list[Provider]:
        """GET /providers: список мастеров (порядок сервера)."""
        path = "/providers"
        result = await self._request("GET", path)
        return _parse_list(Provider, result, "GET", path)

    async def get_day_availability(
        self,
        provider_id: str,
        year: int,
        month: int,
        day: int,
    ) -> list[AvailabilityItem]:
        """GET /providers/{id}/day-availability?year=&month=&day= (month 1-12)."""
        path = f"/providers/{provider_id}/day-availability"
        result = await self._request(
            "GET",
            path,
            params={"year": year, "month": month, "day": day},
        )
        return _parse_list(AvailabilityItem, result, "GET", path)

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    async def create_appointment(self, provider_id: str, date: datetime) -> AppointmentCreated:
        """POST /appointments"""
        path = "/appointments"
        body = AppointmentRequest(provider_id=provider_id, date=date)
        result = await self._request("POST", path, json=body.model_dump(mode="json"))

        try:
            return AppointmentCreated.model_validate(result)
        except pydantic.ValidationError as e:
            logger.error(f"API invalid payload: POST {path} -> {e.error_count()} errors")
            raise ApiError("POST", path, detail="invalid payload") from e


def _error_detail(resp: httpx.Response) -> str:
    """Backend сообщает причину в поле message."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("detail") or "")
    return ""


def _parse_list(model, result, method: str, path: str) -> list:
    if not isinstance(result, list):
        logger.error(f"API invalid payload: {method} {path} -> expected list")
        raise ApiError(method, path, detail="expected list")
    try:
        return [model.model_validate(item) for item in result]
    except pydantic.ValidationError as e:
        logger.error(f"API invalid payload: {method} {path} -> {e.error_count()} errors")
        raise ApiError(method, path, detail="invalid payload") from e


# Singleton
api = ApiClient()
