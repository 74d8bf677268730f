"""
Slot generation over a staff member's working window.

Candidate start times are walked from the window start at a fixed
granularity. A candidate is dropped when it would run past the window end
(truncation) or when it overlaps an appointment or blocked time (conflict).
Only conflicts count towards a day being reported as fully booked.

Usage:
    generator = SlotGenerator(granularity_minutes=15)
    result = generator.generate(window, timedelta(minutes=60), detector)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

import pytz

from booking_engine.scheduling.conflicts import ConflictDetector
from booking_engine.scheduling.intervals import Interval
from booking_engine.schemas.scheduling_schema import StaffAvailabilityRule
from booking_engine.utils import combine_local

logger = logging.getLogger(__name__)

DEFAULT_GRANULARITY_MINUTES = 15


@dataclass
class SlotSearchResult:
    """Open slots plus whether any candidate was lost to a conflict."""

    slots: list[Interval] = field(default_factory=list)
    had_conflict: bool = False

    @property
    def is_fully_booked(self) -> bool:
        return self.had_conflict and not self.slots


def working_window(rule: StaffAvailabilityRule, day: date, tz: pytz.BaseTzInfo) -> Interval:
    """Aware working window for a calendar date under a weekday rule."""
    return Interval(
        combine_local(day, rule.start_time, tz),
        combine_local(day, rule.end_time, tz),
    )


class SlotGenerator:
    """Walks a working window and keeps conflict-free candidates."""

    def __init__(self, granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES) -> None:
        if granularity_minutes < 1:
            raise ValueError(f"granularity_minutes must be >= 1, got {granularity_minutes}")
        self.granularity = timedelta(minutes=granularity_minutes)

    def candidates(self, window: Interval, duration: timedelta) -> list[Interval]:
        """All granularity-aligned intervals of ``duration`` that fit the window."""
        result: list[Interval] = []
        start = window.start
        while start < window.end:
            end = start + duration
            if end > window.end:
                break
            result.append(Interval(start, end))
            start += self.granularity
        return result

    def generate(
        self,
        window: Interval,
        duration: timedelta,
        detector: ConflictDetector,
    ) -> SlotSearchResult:
        """
        Produce the open slots for one working window.

        Args:
            window: The staff member's working window for the day.
            duration: Total appointment length (service plus add-ons).
            detector: Appointments and blocked time for the same day.

        Returns:
            Slots sorted ascending, each exactly ``duration`` long.
        """
        if duration <= timedelta(0):
            raise ValueError(f"duration must be positive, got {duration}")

        result = SlotSearchResult()
        for candidate in self.candidates(window, duration):
            if detector.has_conflict(candidate):
                result.had_conflict = True
                continue
            result.slots.append(candidate)

        logger.debug(
            "Generated %d slot(s) in %s - %s (conflicts=%s)",
            len(result.slots), window.start.isoformat(), window.end.isoformat(),
            result.had_conflict,
        )
        return result
