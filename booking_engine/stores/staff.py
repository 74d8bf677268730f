"""
In-memory staff directory.

In production this would query the staff table (profile plus weekly
default availability) maintained by the admin console.
"""

import logging
from datetime import time
from typing import Iterable, Optional

from booking_engine.schemas.scheduling_schema import StaffAvailabilityRule, StaffMember
from booking_engine.stores.memory import InMemoryRepository

logger = logging.getLogger(__name__)


def _weekdays(start: time, end: time, days: Iterable[int]) -> list[StaffAvailabilityRule]:
    return [StaffAvailabilityRule(day_of_week=d, start_time=start, end_time=end) for d in days]


DEFAULT_STAFF: list[StaffMember] = [
    StaffMember(
        id="staff-amelia",
        name="Amelia R.",
        services=["signature-facial", "hydrafacial", "microneedling"],
        # Monday to Friday
        default_availability=_weekdays(time(9, 0), time(17, 0), range(1, 6)),
    ),
    StaffMember(
        id="staff-noah",
        name="Noah K.",
        services=["brow-lamination", "signature-facial"],
        # Tuesday to Saturday
        default_availability=_weekdays(time(10, 0), time(18, 0), range(2, 7)),
    ),
]


class InMemoryStaffDirectory(InMemoryRepository):
    """Staff profiles keyed by id."""

    def __init__(
        self, staff: Optional[Iterable[StaffMember]] = None, latency: float = 0.0
    ) -> None:
        super().__init__(latency)
        members = DEFAULT_STAFF if staff is None else staff
        self._staff: dict[str, StaffMember] = {m.id: m for m in members}

    async def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        await self.simulate_latency()
        return self._staff.get(staff_id)

    async def list_staff_for_service(self, service_id: str) -> list[StaffMember]:
        await self.simulate_latency()
        return [m for m in self._staff.values() if m.is_active and m.offers(service_id)]

    def add(self, member: StaffMember) -> None:
        self._staff[member.id] = member
        logger.info("Staff member registered: %s (%s)", member.name, member.id)
