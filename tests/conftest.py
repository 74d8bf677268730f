"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest
import pytz

from booking_engine.config import AppConfig, BusinessConfig, SchedulingConfig, WaitlistConfig
from booking_engine.engine import SchedulingEngine
from booking_engine.notifications import LoggingNotifier
from booking_engine.scheduling.intervals import Interval
from booking_engine.schemas.booking_schema import AppointmentDraft, ClientInfo
from booking_engine.schemas.scheduling_schema import BlockedTime, Recurrence
from booking_engine.schemas.waitlist_schema import WaitlistEntry
from booking_engine.stores.appointments import InMemoryAppointmentStore
from booking_engine.stores.blocked_time import InMemoryBlockedTimeStore
from booking_engine.stores.catalog import InMemoryCatalog
from booking_engine.stores.staff import InMemoryStaffDirectory
from booking_engine.stores.waitlist import InMemoryWaitlistStore

# Fixed "now" for every engine under test; the scenario dates below lie after it.
NOW = datetime(2023, 12, 1, 12, 0, tzinfo=timezone.utc)

# 2024-01-01 is a Monday; staff-amelia works 09:00-17:00 Monday to Friday.
MONDAY = date(2024, 1, 1)


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_config(
    business_timezone: str = "UTC",
    granularity: int = 15,
    timeout: float = 1.0,
    allow_past_dates: bool = False,
    auto_contact: bool = True,
) -> AppConfig:
    """Helper to build an AppConfig without touching the environment."""
    return AppConfig(
        business=BusinessConfig(name="Test Studio"),
        scheduling=SchedulingConfig(
            business_timezone=business_timezone,
            slot_granularity_minutes=granularity,
            lookup_timeout_sec=timeout,
            allow_past_dates=allow_past_dates,
        ),
        waitlist=WaitlistConfig(auto_contact_on_cancel=auto_contact),
        log_level="DEBUG",
        engine_name="test",
    )


def make_client(
    name: str = "Jane Doe",
    email: str = "jane@phaceskin.com.au",
    phone: str = "0412 345 678",
) -> ClientInfo:
    return ClientInfo(name=name, email=email, phone=phone)


def make_draft(
    start: datetime,
    minutes: int = 60,
    staff_id: str = "staff-amelia",
    service_id: str = "signature-facial",
    client: Optional[ClientInfo] = None,
) -> AppointmentDraft:
    """Helper to create an AppointmentDraft for a single interval."""
    return AppointmentDraft(
        staff_id=staff_id,
        service_id=service_id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        total_duration=minutes,
        total_price=Decimal("150.00"),
        client=client or make_client(),
    )


def make_blocked(
    start: datetime,
    minutes: int = 60,
    staff_id: str = "staff-amelia",
    frequency: Optional[str] = None,
    until: Optional[datetime] = None,
    reason: Optional[str] = None,
) -> BlockedTime:
    """Helper to create a BlockedTime record, optionally recurring."""
    recurring = Recurrence(frequency=frequency, until=until) if frequency else None
    return BlockedTime(
        staff_id=staff_id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        reason=reason,
        recurring=recurring,
    )


def make_entry(
    preferred_dates=None,
    preferred_staff_ids=None,
    service_id: str = "signature-facial",
    created_at: Optional[datetime] = None,
    **kwargs,
) -> WaitlistEntry:
    """Helper to create a WaitlistEntry for the default client."""
    data = dict(
        service_id=service_id,
        client=make_client(),
        preferred_dates=preferred_dates or [MONDAY],
        preferred_staff_ids=preferred_staff_ids or [],
        **kwargs,
    )
    if created_at is not None:
        data["created_at"] = created_at
    return WaitlistEntry(**data)


def interval(start: datetime, minutes: int) -> Interval:
    return Interval(start, start + timedelta(minutes=minutes))


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def catalog():
    return InMemoryCatalog()


@pytest.fixture
def staff_directory():
    return InMemoryStaffDirectory()


@pytest.fixture
def appointment_store():
    return InMemoryAppointmentStore()


@pytest.fixture
def blocked_store():
    return InMemoryBlockedTimeStore()


@pytest.fixture
def waitlist_store():
    return InMemoryWaitlistStore()


@pytest.fixture
def notifier():
    return LoggingNotifier(pytz.utc, "Test Studio")


@pytest.fixture
def engine(config, catalog, staff_directory, appointment_store, blocked_store, waitlist_store, notifier):
    return SchedulingEngine(
        catalog=catalog,
        staff=staff_directory,
        appointments=appointment_store,
        blocked_times=blocked_store,
        waitlist=waitlist_store,
        notifier=notifier,
        config=config,
        clock=lambda: NOW,
    )
