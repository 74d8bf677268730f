"""Conflict detection against appointments and blocked time."""

from typing import Iterable, Optional

from booking_engine.scheduling.intervals import Interval, overlaps


class ConflictDetector:
    """
    Answers whether a candidate interval collides with a staff member's
    existing appointments or blocked time.

    Any overlap counts, even a single minute. Intervals that merely touch
    (one ends when the other starts) do not conflict.
    """

    def __init__(
        self,
        appointments: Iterable[Interval] = (),
        blocked: Iterable[Interval] = (),
    ) -> None:
        self._appointments = sorted(appointments)
        self._blocked = sorted(blocked)

    @property
    def appointments(self) -> list[Interval]:
        return list(self._appointments)

    @property
    def blocked(self) -> list[Interval]:
        return list(self._blocked)

    def find_conflict(self, candidate: Interval) -> Optional[Interval]:
        """Return the first busy interval overlapping ``candidate``, or None."""
        for busy in self._appointments:
            if overlaps(candidate, busy):
                return busy
        for busy in self._blocked:
            if overlaps(candidate, busy):
                return busy
        return None

    def has_conflict(self, candidate: Interval) -> bool:
        return self.find_conflict(candidate) is not None
