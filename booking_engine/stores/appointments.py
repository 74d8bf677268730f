"""
In-memory appointment store.

``create_appointment`` is a conditional write: the overlap check and the
insert run without yielding to the event loop, so two overlapping creates
for the same staff member can never both land.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from booking_engine.errors import ConflictError, NotFoundError
from booking_engine.scheduling.intervals import Interval, overlaps
from booking_engine.schemas.booking_schema import (
    Appointment,
    AppointmentDraft,
    AppointmentStatus,
    StatusChange,
)
from booking_engine.stores.memory import InMemoryRepository
from booking_engine.utils import new_id

logger = logging.getLogger(__name__)


class InMemoryAppointmentStore(InMemoryRepository):
    """Appointments keyed by id with per-staff overlap guarding."""

    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency)
        self._appointments: dict[str, Appointment] = {}

    def _active_for_staff(self, staff_id: str) -> list[Appointment]:
        return [
            a for a in self._appointments.values()
            if a.staff_id == staff_id and a.is_active
        ]

    async def query_appointments(
        self, staff_id: str, start: datetime, end: datetime
    ) -> list[Appointment]:
        await self.simulate_latency()
        window = Interval(start, end)
        found = [a for a in self._active_for_staff(staff_id) if overlaps(a.interval, window)]
        return [a.model_copy(deep=True) for a in sorted(found, key=lambda a: a.start_time)]

    async def create_appointment(self, draft: AppointmentDraft) -> Appointment:
        await self.simulate_latency()
        candidate = draft.interval
        for existing in self._active_for_staff(draft.staff_id):
            if overlaps(existing.interval, candidate):
                raise ConflictError(
                    f"Staff {draft.staff_id} already has appointment {existing.id} "
                    f"overlapping {candidate.start.isoformat()}"
                )

        appointment = Appointment(
            id=new_id("APT"),
            status=AppointmentStatus.REQUESTED,
            status_history=[StatusChange(status=AppointmentStatus.REQUESTED)],
            **draft.model_dump(),
        )
        self._appointments[appointment.id] = appointment
        return appointment.model_copy(deep=True)

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        await self.simulate_latency()
        appointment = self._appointments.get(appointment_id)
        return appointment.model_copy(deep=True) if appointment else None

    async def update_status(
        self,
        appointment_id: str,
        new_status: AppointmentStatus,
        expected_status: AppointmentStatus,
    ) -> Appointment:
        await self.simulate_latency()
        appointment = self._appointments.get(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)
        if appointment.status != expected_status:
            raise ConflictError(
                f"Appointment {appointment_id} is now '{appointment.status.value}', "
                f"expected '{expected_status.value}'"
            )
        now = datetime.now(timezone.utc)
        appointment.status = new_status
        appointment.status_history.append(StatusChange(status=new_status, changed_at=now))
        appointment.updated_at = now
        return appointment.model_copy(deep=True)

    async def query_client_appointments(self, email: str) -> list[Appointment]:
        await self.simulate_latency()
        needle = email.strip().lower()
        found = [a for a in self._appointments.values() if a.client.email.lower() == needle]
        return [a.model_copy(deep=True) for a in sorted(found, key=lambda a: a.start_time)]

    def reset(self) -> None:
        """Clear all appointments. Used by test fixtures for isolation."""
        self._appointments.clear()
