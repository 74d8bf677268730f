"""Catalog, staff schedule, and blocked-time data models."""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from booking_engine.scheduling.intervals import Interval
from booking_engine.utils import day_of_week, new_id


class Service(BaseModel):
    """Bookable service from the catalog."""
    id: str
    name: str = ""
    duration: int = Field(gt=0, description="Minutes")
    price: Decimal = Field(default=Decimal("0"), ge=0)


class Addon(BaseModel):
    """Optional extra that lengthens and prices up a service."""
    id: str
    service_id: Optional[str] = None
    name: str = ""
    duration: int = Field(default=0, ge=0, description="Minutes")
    price: Decimal = Field(default=Decimal("0"), ge=0)


class StaffAvailabilityRule(BaseModel):
    """Working window for one weekday (0 = Sunday ... 6 = Saturday)."""
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def _check_window(self) -> "StaffAvailabilityRule":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class StaffMember(BaseModel):
    """Staff directory record."""
    id: str
    name: str = ""
    services: list[str] = Field(default_factory=list)
    default_availability: list[StaffAvailabilityRule] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("default_availability")
    @classmethod
    def _one_rule_per_day(cls, rules: list[StaffAvailabilityRule]) -> list[StaffAvailabilityRule]:
        days = [r.day_of_week for r in rules]
        if len(days) != len(set(days)):
            raise ValueError("at most one availability rule per day_of_week")
        return rules

    def rule_for(self, day: date) -> Optional[StaffAvailabilityRule]:
        """Return the working window rule for a calendar date, if any."""
        weekday = day_of_week(day)
        for rule in self.default_availability:
            if rule.day_of_week == weekday:
                return rule
        return None

    def offers(self, service_id: str) -> bool:
        """An empty services list means the staff member takes any service."""
        return not self.services or service_id in self.services


class RecurrenceFrequency(str, Enum):
    """How often a blocked-time occurrence repeats."""
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def step_days(self) -> int:
        return 1 if self is RecurrenceFrequency.DAILY else 7


class Recurrence(BaseModel):
    """Repeat rule for blocked time; occurrences start no later than ``until``."""
    frequency: RecurrenceFrequency
    until: datetime


class BlockedTime(BaseModel):
    """
    A stored blocked-time series (one record, expanded on read).

    ``excluded_starts`` lists occurrences removed from a recurring series
    one at a time; the series origin is never excluded, only deleted.
    """
    id: str = Field(default_factory=lambda: new_id("BLK"))
    staff_id: str
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = None
    recurring: Optional[Recurrence] = None
    excluded_starts: list[datetime] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _check_range(self) -> "BlockedTime":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        for name in ("start_time", "end_time"):
            if getattr(self, name).tzinfo is None:
                raise ValueError(f"{name} must be timezone-aware")
        if self.recurring is not None and self.recurring.until.tzinfo is None:
            raise ValueError("recurring.until must be timezone-aware")
        if any(s.tzinfo is None for s in self.excluded_starts):
            raise ValueError("excluded_starts must be timezone-aware")
        return self

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)
