"""Waitlist data models."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from booking_engine.schemas.booking_schema import ClientInfo
from booking_engine.utils import new_id


class WaitlistStatus(str, Enum):
    """Lifecycle status of a waitlist entry."""
    ACTIVE = "active"
    CONTACTED = "contacted"
    BOOKED = "booked"
    EXPIRED = "expired"


class WaitlistEntry(BaseModel):
    """A client waiting for a slot to free up."""
    id: str = Field(default_factory=lambda: new_id("WL"))
    service_id: str
    client: ClientInfo
    preferred_dates: list[date] = Field(min_length=1)
    preferred_staff_ids: list[str] = Field(default_factory=list)
    status: WaitlistStatus = WaitlistStatus.ACTIVE
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
