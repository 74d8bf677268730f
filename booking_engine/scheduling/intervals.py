"""Half-open ``[start, end)`` interval arithmetic.

Touching endpoints do not overlap: an appointment ending at 10:00 and one
starting at 10:00 can share a staff member.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, order=True)
class Interval:
    """A time range that includes ``start`` and excludes ``end``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"Interval end {self.end} must be after start {self.start}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def shifted(self, delta: timedelta) -> "Interval":
        return Interval(self.start + delta, self.end + delta)

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff the two intervals share at least one instant."""
    return a.start < b.end and a.end > b.start


def within(inner: Interval, outer: Interval) -> bool:
    """True iff ``inner`` lies entirely inside ``outer``."""
    return inner.start >= outer.start and inner.end <= outer.end
