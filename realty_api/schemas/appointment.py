"""Appointment schemas - Pydantic models for appointments API."""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from realty_api.db.enums import AppointmentStatus
from realty_api.services import slot_service
from realty_api.services.booking_errors import InvalidTimeFormatError


def coerce_calendar_day(value):
    """Accept a date or an ISO datetime and keep only the calendar day."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        try:
            return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError("Invalid date format")
    return value


def validate_time(value: str | None) -> str | None:
    """Validate "HH:MM" and zero-pad it."""
    if value is None:
        return None
    try:
        return slot_service.normalize_time(value)
    except InvalidTimeFormatError as e:
        raise ValueError(str(e))


# =============================================================================
# Requests
# =============================================================================

class AppointmentCreate(BaseModel):
    """Schema for booking a viewing. end_time is always derived."""
    property_id: UUID
    date: dt.date
    start_time: str = Field(..., description="HH:MM, 24-hour")
    notes: str | None = Field(None, max_length=2000)

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return coerce_calendar_day(v)

    @field_validator("start_time")
    @classmethod
    def normalize_start_time(cls, v: str) -> str:
        return validate_time(v)


class AppointmentUpdate(BaseModel):
    """
    Schema for updating an appointment.

    Clients may only send status (cancelled) and client_notes;
    anything else they send is ignored.
    """
    date: dt.date | None = None
    start_time: str | None = None
    status: AppointmentStatus | None = None
    notes: str | None = Field(None, max_length=2000)
    client_notes: str | None = Field(None, max_length=2000)
    agent_notes: str | None = Field(None, max_length=2000)
    agent_id: UUID | None = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return coerce_calendar_day(v)

    @field_validator("start_time")
    @classmethod
    def normalize_start_time(cls, v: str | None) -> str | None:
        return validate_time(v)


class AppointmentConfirm(BaseModel):
    """Schema for confirming an appointment."""
    agent_id: UUID


# =============================================================================
# Responses
# =============================================================================

class PropertySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    location: str
    image_url: str | None
    price: Decimal


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    phone: str | None


class AppointmentRead(BaseModel):
    """Schema for reading an appointment."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    property_id: UUID
    client_id: UUID
    agent_id: UUID | None
    date: dt.date
    start_time: str
    end_time: str
    status: AppointmentStatus
    notes: str | None
    client_notes: str | None
    agent_notes: str | None
    created_at: dt.datetime
    updated_at: dt.datetime


class AppointmentDetailRead(AppointmentRead):
    """Appointment with joined property, client and agent summaries."""
    property: PropertySummary | None = None
    client: UserSummary | None = None
    agent: UserSummary | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class AppointmentResponse(BaseModel):
    message: str
    data: AppointmentRead


class AppointmentDetailResponse(BaseModel):
    message: str
    data: AppointmentDetailRead


class AppointmentListResponse(BaseModel):
    """Schema for appointment list response."""
    message: str
    data: list[AppointmentDetailRead]
    pagination: Pagination
