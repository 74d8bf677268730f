"""Booking, appointment, and availability data models."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from booking_engine.scheduling.intervals import Interval
from booking_engine.utils import normalize_phone

MIN_NAME_LENGTH = 2
MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AppointmentStatus(str, Enum):
    """Closed set of appointment statuses."""
    REQUESTED = "requested"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Statuses that hold a staff member's time.
ACTIVE_STATUSES = frozenset({AppointmentStatus.REQUESTED, AppointmentStatus.CONFIRMED})


class ClientInfo(BaseModel):
    """Contact details of the person booking."""
    name: str
    email: EmailStr
    phone: str

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_NAME_LENGTH:
            raise ValueError("name is too short")
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        cleaned = normalize_phone(value)
        digits = cleaned.lstrip("+")
        if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
            raise ValueError(f"phone number '{value}' doesn't look right")
        return cleaned


class StatusChange(BaseModel):
    """Recorded history entry for a status transition."""
    status: AppointmentStatus
    changed_at: datetime = Field(default_factory=_utc_now)


class AppointmentDraft(BaseModel):
    """Everything needed to create an appointment, prior to commit."""
    staff_id: str
    service_id: str
    addon_ids: list[str] = Field(default_factory=list)
    start_time: datetime
    end_time: datetime
    total_duration: int
    total_price: Decimal
    client: ClientInfo
    notes: Optional[str] = None

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)


class Appointment(AppointmentDraft):
    """Committed appointment record."""
    id: str
    status: AppointmentStatus = AppointmentStatus.REQUESTED
    status_history: list[StatusChange] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class AvailabilityResult(BaseModel):
    """Open slots for one (service, staff, date, add-ons) query."""
    slots: list[Interval] = Field(default_factory=list)
    staff_available: bool
    is_fully_booked: bool = False
    total_duration: int = 0
    total_price: Decimal = Decimal("0")
    message: str = ""
