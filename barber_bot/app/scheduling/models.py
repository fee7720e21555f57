# barber_bot/app/scheduling/models.py
"""
Pydantic schemas for the scheduling API payloads.
"""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class Provider(BaseModel):
    """Bookable service professional."""
    id: str
    name: str
    avatar_url: str = ""

    model_config = {"frozen": True}

    @field_validator("avatar_url", mode="before")
    @classmethod
    def no_avatar(cls, v):
        return v or ""


class AvailabilityItem(BaseModel):
    """Bookable status of one hour for a provider/day."""
    hour: int = Field(ge=0, le=23)
    available: bool

    model_config = {"frozen": True}


class AvailabilitySlot(BaseModel):
    """View-ready availability item."""
    hour: int
    available: bool
    hour_formatted: str = Field(description="Zero-padded label, e.g. '09:00'")

    model_config = {"frozen": True}


class UserIdentity(BaseModel):
    """Signed-in user, display only."""
    name: str
    avatar_url: str = ""


class AppointmentRequest(BaseModel):
    """Body of POST /appointments."""
    provider_id: str
    date: datetime


class AppointmentCreated(BaseModel):
    """Response of POST /appointments."""
    id: str
    date: datetime
    provider_id: str | None = None
