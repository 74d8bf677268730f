"""
Guarded booking commit.

A client may sit on an availability response for minutes before booking,
so the chosen slot is re-checked against current appointments and blocked
time immediately before the appointment is created. Commits for the same
staff member run one at a time behind a per-staff lock, and the store's
create is itself a conditional write, so two overlapping commits can never
both succeed.
"""

import asyncio
from collections import defaultdict

import pytz

from booking_engine.errors import ConflictError, ValidationError
from booking_engine.logging_context import get_request_logger
from booking_engine.scheduling.blocked_time import expand_all
from booking_engine.scheduling.conflicts import ConflictDetector
from booking_engine.scheduling.intervals import Interval
from booking_engine.schemas.booking_schema import Appointment, AppointmentDraft
from booking_engine.stores.base import AppointmentStore, BlockedTimeStore
from booking_engine.utils import call_with_timeout

logger = get_request_logger(__name__)

SLOT_TAKEN_MESSAGE = "Selected time slot is no longer available"


class BookingCommitter:
    """Serializes commits per staff member and re-validates before writing."""

    def __init__(
        self,
        appointments: AppointmentStore,
        blocked_times: BlockedTimeStore,
        tz: pytz.BaseTzInfo,
        timeout: float,
    ) -> None:
        self._appointments = appointments
        self._blocked_times = blocked_times
        self._tz = tz
        self._timeout = timeout
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock_for(self, staff_id: str) -> asyncio.Lock:
        return self._locks[staff_id]

    async def _detector_for(self, staff_id: str, interval: Interval) -> ConflictDetector:
        existing = await call_with_timeout(
            self._appointments.query_appointments(staff_id, interval.start, interval.end),
            self._timeout,
            "Appointment lookup",
        )
        records = await call_with_timeout(
            self._blocked_times.query_blocked_time(staff_id, interval.start, interval.end),
            self._timeout,
            "Blocked time lookup",
        )
        blocked = expand_all(records, interval.start, interval.end, self._tz)
        return ConflictDetector([a.interval for a in existing], blocked)

    async def commit(
        self, staff_id: str, interval: Interval, draft: AppointmentDraft
    ) -> Appointment:
        """
        Re-check ``interval`` for ``staff_id`` and create the appointment.

        Raises:
            ValidationError: If the draft does not describe ``interval`` for ``staff_id``.
            ConflictError: If the slot overlaps an appointment or blocked time.
            TransientError: If a store lookup or write times out.
        """
        if draft.staff_id != staff_id or draft.interval != interval:
            raise ValidationError("Appointment draft does not match the requested slot")

        async with self.lock_for(staff_id):
            detector = await self._detector_for(staff_id, interval)
            busy = detector.find_conflict(interval)
            if busy is not None:
                logger.warning(
                    "Commit rejected for staff %s at %s: overlaps %s - %s",
                    staff_id, interval.start.isoformat(),
                    busy.start.isoformat(), busy.end.isoformat(),
                )
                raise ConflictError(SLOT_TAKEN_MESSAGE)

            try:
                appointment = await call_with_timeout(
                    self._appointments.create_appointment(draft),
                    self._timeout,
                    "Appointment create",
                )
            except ConflictError as exc:
                logger.warning("Conditional write rejected for staff %s: %s", staff_id, exc)
                raise ConflictError(SLOT_TAKEN_MESSAGE, cause=exc) from exc

        logger.info(
            "Appointment %s committed for staff %s: %s - %s",
            appointment.id, staff_id,
            interval.start.isoformat(), interval.end.isoformat(),
        )
        return appointment
