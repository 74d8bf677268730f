"""Shared utilities used across the booking engine."""

import asyncio
import logging
import re
import uuid
from datetime import date, datetime, time, timedelta
from typing import Awaitable, TypeVar

import pytz

from booking_engine.errors import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def new_id(prefix: str) -> str:
    """Short unique record id such as ``APT-1A2B3C4D``."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("0412 345 678")
        '0412345678'
        >>> normalize_phone("+61 (412) 345-678")
        '+61412345678'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def localize(naive: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Attach ``tz`` to a naive wall-clock datetime, normalizing DST offsets."""
    return tz.normalize(tz.localize(naive))


def ensure_aware(value: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Interpret a naive datetime as business-local time; leave aware ones alone."""
    if value.tzinfo is None:
        return localize(value, tz)
    return value


def combine_local(day: date, at: time, tz: pytz.BaseTzInfo) -> datetime:
    """Build the aware instant for a local time-of-day on a calendar date."""
    return localize(datetime.combine(day, at), tz)


def local_date(value: datetime, tz: pytz.BaseTzInfo) -> date:
    """Calendar date of an aware instant in the business timezone."""
    return value.astimezone(tz).date()


def local_day_bounds(day: date, tz: pytz.BaseTzInfo) -> tuple[datetime, datetime]:
    """Return ``[local midnight, next local midnight)`` for a calendar date."""
    start = combine_local(day, time.min, tz)
    end = combine_local(day + timedelta(days=1), time.min, tz)
    return start, end


def day_of_week(day: date) -> int:
    """Weekday number with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


async def call_with_timeout(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a collaborator call, mapping timeouts and connection failures to TransientError."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("%s timed out after %.1fs", operation, timeout)
        raise TransientError(f"{operation} timed out", cause=exc) from exc
    except ConnectionError as exc:
        logger.warning("%s failed: %s", operation, exc)
        raise TransientError(f"{operation} unavailable", cause=exc) from exc
