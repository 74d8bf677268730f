"""
Blocked-time expansion.

A blocked-time record is stored once; recurring records are expanded into
concrete occurrences only for the window being queried. Occurrences keep the
local wall-clock time of the original in the business timezone, so a weekly
09:00 block stays at 09:00 across a daylight-saving change. Single
occurrences removed from a series are listed in ``excluded_starts``.

Usage:
    intervals = expand_blocked_time(record, day_start, day_end, tz)
    if is_later_occurrence(record, monday_noon, tz):
        record = record.model_copy(update={"excluded_starts": [*record.excluded_starts, monday_noon]})
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable

import pytz

from booking_engine.scheduling.intervals import Interval, overlaps
from booking_engine.schemas.scheduling_schema import BlockedTime
from booking_engine.utils import localize

logger = logging.getLogger(__name__)


def _first_candidate_step(local_end: datetime, window_start_local: datetime, step_days: int) -> int:
    """Skip whole steps that end well before the window; never the origin."""
    gap_days = (window_start_local - local_end).days
    return max(1, gap_days // step_days)


def expand_blocked_time(
    blocked: BlockedTime,
    window_start: datetime,
    window_end: datetime,
    tz: pytz.BaseTzInfo,
) -> list[Interval]:
    """
    Expand one blocked-time record into the occurrences intersecting a window.

    Args:
        blocked: Stored record, optionally carrying a recurrence rule.
        window_start: Inclusive start of the query window (aware).
        window_end: Exclusive end of the query window (aware).
        tz: Business timezone used for wall-clock stepping.

    Returns:
        Occurrences ordered by start. The stored occurrence appears at most once.
    """
    window = Interval(window_start, window_end)
    origin = blocked.interval
    occurrences: list[Interval] = []

    if overlaps(origin, window):
        occurrences.append(origin)

    rule = blocked.recurring
    if rule is None:
        return occurrences

    step = timedelta(days=rule.frequency.step_days)
    local_start = blocked.start_time.astimezone(tz).replace(tzinfo=None)
    local_end = blocked.end_time.astimezone(tz).replace(tzinfo=None)
    window_start_local = window_start.astimezone(tz).replace(tzinfo=None)

    excluded = set(blocked.excluded_starts)
    k = _first_candidate_step(local_end, window_start_local, rule.frequency.step_days)
    while True:
        start = localize(local_start + k * step, tz)
        if start > rule.until or start >= window_end:
            break
        end = localize(local_end + k * step, tz)
        if end > start and start not in excluded:
            candidate = Interval(start, end)
            if overlaps(candidate, window):
                occurrences.append(candidate)
        k += 1

    logger.debug(
        "Expanded blocked time %s (%s) into %d occurrence(s) for %s - %s",
        blocked.id, rule.frequency.value, len(occurrences),
        window_start.isoformat(), window_end.isoformat(),
    )
    return occurrences


def expand_all(
    records: Iterable[BlockedTime],
    window_start: datetime,
    window_end: datetime,
    tz: pytz.BaseTzInfo,
) -> list[Interval]:
    """Expand every record and return all occurrences sorted by start."""
    intervals: list[Interval] = []
    for record in records:
        intervals.extend(expand_blocked_time(record, window_start, window_end, tz))
    return sorted(intervals)


def series_end(blocked: BlockedTime) -> datetime:
    """Latest instant any occurrence of the series can reach."""
    if blocked.recurring is None:
        return blocked.end_time
    # One extra day covers a DST shift of the final occurrence.
    return max(blocked.end_time, blocked.recurring.until + blocked.interval.duration + timedelta(days=1))


def is_later_occurrence(blocked: BlockedTime, start: datetime, tz: pytz.BaseTzInfo) -> bool:
    """Whether ``start`` begins a live occurrence of the series other than its origin."""
    if blocked.recurring is None or start == blocked.start_time:
        return False
    window_end = start + timedelta(minutes=1)
    return any(o.start == start for o in expand_blocked_time(blocked, start, window_end, tz))
