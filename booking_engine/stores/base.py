"""
Collaborator contracts the scheduling engine depends on.

Implementations may be backed by any store. Every method is a coroutine;
the engine wraps each call in a timeout and treats timeouts and connection
failures as transient.
"""

from datetime import datetime
from typing import Optional, Protocol, Sequence

from booking_engine.schemas.booking_schema import Appointment, AppointmentDraft, AppointmentStatus
from booking_engine.schemas.scheduling_schema import Addon, BlockedTime, Service, StaffMember
from booking_engine.schemas.waitlist_schema import WaitlistEntry, WaitlistStatus


class Catalog(Protocol):
    async def get_service(self, service_id: str) -> Optional[Service]: ...

    async def get_addons(self, addon_ids: Sequence[str]) -> list[Addon]:
        """May return fewer records than ids requested; unknown ids are skipped."""
        ...

    async def get_service_addons(self, service_id: str) -> list[Addon]: ...


class StaffDirectory(Protocol):
    async def get_staff(self, staff_id: str) -> Optional[StaffMember]: ...

    async def list_staff_for_service(self, service_id: str) -> list[StaffMember]: ...


class AppointmentStore(Protocol):
    async def query_appointments(
        self, staff_id: str, start: datetime, end: datetime
    ) -> list[Appointment]:
        """Non-terminal appointments for the staff member overlapping ``[start, end)``."""
        ...

    async def create_appointment(self, draft: AppointmentDraft) -> Appointment:
        """
        Conditional write: must raise ConflictError instead of inserting when a
        non-terminal appointment for the same staff member overlaps the draft.
        """
        ...

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]: ...

    async def update_status(
        self,
        appointment_id: str,
        new_status: AppointmentStatus,
        expected_status: AppointmentStatus,
    ) -> Appointment:
        """Compare-and-set; raises ConflictError if the status changed meanwhile."""
        ...

    async def query_client_appointments(self, email: str) -> list[Appointment]: ...


class BlockedTimeStore(Protocol):
    async def query_blocked_time(
        self, staff_id: str, start: datetime, end: datetime
    ) -> list[BlockedTime]:
        """Every record whose series may produce an occurrence in ``[start, end)``."""
        ...

    async def create_blocked_time(self, record: BlockedTime) -> BlockedTime: ...

    async def delete_blocked_time(self, staff_id: str, start_time: datetime) -> bool:
        """Delete the record whose stored start is ``start_time``; False if none matched."""
        ...


class WaitlistStore(Protocol):
    async def create_entry(self, entry: WaitlistEntry) -> WaitlistEntry: ...

    async def get_entry(self, entry_id: str) -> Optional[WaitlistEntry]: ...

    async def list_entries(
        self, status: Optional[WaitlistStatus] = None, service_id: Optional[str] = None
    ) -> list[WaitlistEntry]: ...

    async def update_entry(
        self,
        entry_id: str,
        status: WaitlistStatus,
        notes: Optional[str] = None,
        expected_status: Optional[WaitlistStatus] = None,
    ) -> WaitlistEntry:
        """When ``expected_status`` is given, raises ConflictError if the entry moved on meanwhile."""
        ...

    async def delete_entry(self, entry_id: str) -> bool: ...


class Notifier(Protocol):
    async def send_appointment_confirmation(
        self, appointment: Appointment, service: Service, staff: StaffMember
    ) -> None: ...
