"""
Scheduling engine: the inbound surface for availability, booking, status
updates, blocked time and the waitlist.

The engine owns no storage. It composes the pure scheduling components
(interval math, blocked-time expansion, duration aggregation, conflict
detection, slot generation) with async collaborators, wraps every
collaborator call in a timeout, and funnels every booking through the
BookingCommitter so that one staff member is never double-booked.

Usage:
    engine = SchedulingEngine.in_memory()
    result = await engine.get_availability("signature-facial", "staff-amelia", date(2030, 1, 7))
    appointment = await engine.create_appointment(
        "signature-facial", "staff-amelia", result.slots[0].start,
        client={"name": "Jane Doe", "email": "jane@phaceskin.com.au", "phone": "0412 345 678"},
    )
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from booking_engine.config import AppConfig, settings
from booking_engine.errors import NotFoundError, SchedulingError, ValidationError
from booking_engine.logging_context import ensure_request_id, get_request_logger
from booking_engine.notifications import LoggingNotifier
from booking_engine.scheduling.blocked_time import expand_all, is_later_occurrence
from booking_engine.scheduling.committer import BookingCommitter
from booking_engine.scheduling.conflicts import ConflictDetector
from booking_engine.scheduling.durations import aggregate, resolve_addons
from booking_engine.scheduling.intervals import Interval, within
from booking_engine.scheduling.lifecycle import AppointmentLifecycle, parse_status
from booking_engine.scheduling.slots import SlotGenerator, working_window
from booking_engine.scheduling.waitlist import (
    WaitlistReconciler,
    parse_waitlist_status,
    validate_waitlist_transition,
)
from booking_engine.schemas.booking_schema import (
    Appointment,
    AppointmentDraft,
    AppointmentStatus,
    AvailabilityResult,
    ClientInfo,
)
from booking_engine.schemas.scheduling_schema import (
    Addon,
    BlockedTime,
    Recurrence,
    Service,
    StaffMember,
)
from booking_engine.schemas.waitlist_schema import WaitlistEntry, WaitlistStatus
from booking_engine.stores.appointments import InMemoryAppointmentStore
from booking_engine.stores.base import (
    AppointmentStore,
    BlockedTimeStore,
    Catalog,
    Notifier,
    StaffDirectory,
    WaitlistStore,
)
from booking_engine.stores.blocked_time import InMemoryBlockedTimeStore
from booking_engine.stores.catalog import InMemoryCatalog
from booking_engine.stores.staff import InMemoryStaffDirectory
from booking_engine.stores.waitlist import InMemoryWaitlistStore
from booking_engine.utils import (
    call_with_timeout,
    ensure_aware,
    local_date,
    local_day_bounds,
)

logger = get_request_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

PAST_DATE_MESSAGE = "Date is in the past"
NOT_WORKING_MESSAGE = "Staff member is not working on this date"


def _build(model: type[M], data: Any) -> M:
    """Validate input into a model, surfacing pydantic failures as ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or model.__name__
        raise ValidationError(
            f"Invalid {model.__name__} ({location}): {first.get('msg')}", cause=exc
        ) from exc


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")


def _parse_date(value: Union[date, str, None]) -> date:
    _require(value, "date")
    if isinstance(value, datetime):
        raise ValidationError("date must be a calendar date, not a timestamp")
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"date '{value}' is not in YYYY-MM-DD format") from None


def _parse_datetime(value: Union[datetime, str, None], name: str) -> datetime:
    _require(value, name)
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{name} '{value}' is not an ISO-8601 timestamp") from None


class SchedulingEngine:
    """Availability and booking operations over pluggable collaborators."""

    def __init__(
        self,
        catalog: Catalog,
        staff: StaffDirectory,
        appointments: AppointmentStore,
        blocked_times: BlockedTimeStore,
        waitlist: WaitlistStore,
        notifier: Optional[Notifier] = None,
        config: Optional[AppConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        config = config or settings
        self.config = config
        self._catalog = catalog
        self._staff = staff
        self._appointments = appointments
        self._blocked_times = blocked_times
        self._waitlist = waitlist
        self._tz = config.scheduling.tz
        self._timeout = config.scheduling.lookup_timeout_sec
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._notifier = notifier or LoggingNotifier(self._tz, config.business.name)

        self.slot_generator = SlotGenerator(config.scheduling.slot_granularity_minutes)
        self.committer = BookingCommitter(appointments, blocked_times, self._tz, self._timeout)
        self.lifecycle = AppointmentLifecycle()
        self.reconciler = WaitlistReconciler(waitlist, self._tz, self._timeout)

    @classmethod
    def in_memory(
        cls,
        config: Optional[AppConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        **collaborators: Any,
    ) -> "SchedulingEngine":
        """Engine wired to the seeded in-memory stores; any store can be overridden."""
        return cls(
            catalog=collaborators.get("catalog") or InMemoryCatalog(),
            staff=collaborators.get("staff") or InMemoryStaffDirectory(),
            appointments=collaborators.get("appointments") or InMemoryAppointmentStore(),
            blocked_times=collaborators.get("blocked_times") or InMemoryBlockedTimeStore(),
            waitlist=collaborators.get("waitlist") or InMemoryWaitlistStore(),
            notifier=collaborators.get("notifier"),
            config=config,
            clock=clock,
        )

    # ------------------------------------------------------------------ #
    # Collaborator helpers
    # ------------------------------------------------------------------ #

    async def _call(self, awaitable: Awaitable[T], operation: str) -> T:
        return await call_with_timeout(awaitable, self._timeout, operation)

    def _now(self) -> datetime:
        return self._clock()

    def _today(self) -> date:
        return local_date(self._now(), self._tz)

    async def _require_service(self, service_id: str) -> Service:
        service = await self._call(self._catalog.get_service(service_id), "Service lookup")
        if service is None:
            raise NotFoundError("Service", service_id)
        return service

    async def _require_staff(self, staff_id: str) -> StaffMember:
        staff = await self._call(self._staff.get_staff(staff_id), "Staff lookup")
        if staff is None:
            raise NotFoundError("Staff member", staff_id)
        return staff

    async def _addons(self, addon_ids: Sequence[str]) -> list[Addon]:
        if not addon_ids:
            return []
        found = await self._call(self._catalog.get_addons(list(addon_ids)), "Add-on lookup")
        return resolve_addons(addon_ids, found)

    async def _busy_for(self, staff_id: str, start: datetime, end: datetime) -> ConflictDetector:
        appointments = await self._call(
            self._appointments.query_appointments(staff_id, start, end), "Appointment lookup"
        )
        records = await self._call(
            self._blocked_times.query_blocked_time(staff_id, start, end), "Blocked time lookup"
        )
        return ConflictDetector(
            [a.interval for a in appointments],
            expand_all(records, start, end, self._tz),
        )

    # ------------------------------------------------------------------ #
    # Availability
    # ------------------------------------------------------------------ #

    async def get_availability(
        self,
        service_id: str,
        staff_id: str,
        day: Union[date, str],
        addon_ids: Optional[Sequence[str]] = None,
    ) -> AvailabilityResult:
        """
        Open slots for a service (plus add-ons) with one staff member on one date.

        Raises:
            ValidationError: If service id, staff id or date is missing or malformed.
            NotFoundError: If the service or staff member does not exist.
            TransientError: If a collaborator lookup times out.
        """
        ensure_request_id()
        _require(service_id, "service_id")
        _require(staff_id, "staff_id")
        day = _parse_date(day)
        addon_ids = list(addon_ids or [])
        logger.info(
            "Availability request: service=%s staff=%s date=%s addons=%s",
            service_id, staff_id, day.isoformat(), ",".join(addon_ids) or "none",
        )

        service = await self._require_service(service_id)
        staff = await self._require_staff(staff_id)
        totals = aggregate(service, await self._addons(addon_ids))
        base = {"total_duration": totals.duration_minutes, "total_price": totals.price}

        if not self.config.scheduling.allow_past_dates and day < self._today():
            logger.info("Requested date %s is in the past", day.isoformat())
            return AvailabilityResult(staff_available=False, message=PAST_DATE_MESSAGE, **base)

        rule = staff.rule_for(day) if staff.is_active else None
        if rule is None:
            return AvailabilityResult(staff_available=False, message=NOT_WORKING_MESSAGE, **base)

        window = working_window(rule, day, self._tz)
        day_start, day_end = local_day_bounds(day, self._tz)
        detector = await self._busy_for(staff_id, day_start, day_end)
        search = self.slot_generator.generate(window, totals.duration, detector)

        if search.slots:
            message = f"{len(search.slots)} time slots available on {day.isoformat()}."
        elif search.is_fully_booked:
            message = f"Fully booked on {day.isoformat()}."
        else:
            message = f"No slot on {day.isoformat()} fits a {totals.duration_minutes}-minute appointment."

        logger.info(
            "Availability for staff %s on %s: %d slot(s), fully_booked=%s",
            staff_id, day.isoformat(), len(search.slots), search.is_fully_booked,
        )
        return AvailabilityResult(
            slots=search.slots,
            staff_available=True,
            is_fully_booked=search.is_fully_booked,
            message=message,
            **base,
        )

    async def list_staff_for_service(self, service_id: str) -> list[StaffMember]:
        ensure_request_id()
        _require(service_id, "service_id")
        await self._require_service(service_id)
        return await self._call(self._staff.list_staff_for_service(service_id), "Staff lookup")

    async def get_service_addons(self, service_id: str) -> list[Addon]:
        ensure_request_id()
        _require(service_id, "service_id")
        await self._require_service(service_id)
        return await self._call(self._catalog.get_service_addons(service_id), "Add-on lookup")

    # ------------------------------------------------------------------ #
    # Appointments
    # ------------------------------------------------------------------ #

    async def create_appointment(
        self,
        service_id: str,
        staff_id: str,
        start_time: Union[datetime, str],
        addon_ids: Optional[Sequence[str]] = None,
        client: Union[ClientInfo, dict, None] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Book a slot after re-checking it against current state.

        Raises:
            ValidationError: Missing/malformed fields, a start in the past, a slot
                outside working hours, or a service the staff member does not offer.
            NotFoundError: Unknown service or staff member.
            ConflictError: The slot is no longer free (retryable).
            TransientError: A collaborator timed out (retryable).
        """
        ensure_request_id()
        _require(service_id, "service_id")
        _require(staff_id, "staff_id")
        start = ensure_aware(_parse_datetime(start_time, "start_time"), self._tz)
        _require(client, "client")
        client_info = _build(ClientInfo, client)
        addon_ids = list(addon_ids or [])

        service = await self._require_service(service_id)
        staff = await self._require_staff(staff_id)
        if not staff.is_active or not staff.offers(service_id):
            raise ValidationError(f"Staff member {staff_id} does not offer service {service_id}")

        addons = await self._addons(addon_ids)
        totals = aggregate(service, addons)
        interval = Interval(start, start + totals.duration)

        if not self.config.scheduling.allow_past_dates and start < self._now():
            raise ValidationError("Cannot book an appointment in the past")

        day = local_date(start, self._tz)
        rule = staff.rule_for(day)
        if rule is None or not within(interval, working_window(rule, day, self._tz)):
            raise ValidationError(
                f"Requested time {start.isoformat()} is outside working hours for staff {staff_id}"
            )

        draft = AppointmentDraft(
            staff_id=staff_id,
            service_id=service_id,
            addon_ids=[a.id for a in addons],
            start_time=interval.start,
            end_time=interval.end,
            total_duration=totals.duration_minutes,
            total_price=totals.price,
            client=client_info,
            notes=notes,
        )
        appointment = await self.committer.commit(staff_id, interval, draft)

        try:
            await self._call(
                self._notifier.send_appointment_confirmation(appointment, service, staff),
                "Confirmation notification",
            )
        except Exception:
            # The booking is already committed; a retry would double-book the client.
            logger.exception("Confirmation notification failed for %s", appointment.id)
        return appointment

    async def get_appointment(self, appointment_id: str) -> Appointment:
        ensure_request_id()
        _require(appointment_id, "appointment_id")
        appointment = await self._call(
            self._appointments.get_appointment(appointment_id), "Appointment lookup"
        )
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    async def list_staff_appointments(
        self, staff_id: str, start: Union[datetime, str], end: Union[datetime, str]
    ) -> list[Appointment]:
        """Active appointments for a staff member overlapping ``[start, end)``."""
        ensure_request_id()
        _require(staff_id, "staff_id")
        start_dt = ensure_aware(_parse_datetime(start, "start"), self._tz)
        end_dt = ensure_aware(_parse_datetime(end, "end"), self._tz)
        if end_dt <= start_dt:
            raise ValidationError("end must be after start")
        return await self._call(
            self._appointments.query_appointments(staff_id, start_dt, end_dt), "Appointment lookup"
        )

    async def list_client_appointments(self, email: str) -> list[Appointment]:
        ensure_request_id()
        _require(email, "email")
        return await self._call(
            self._appointments.query_client_appointments(email), "Appointment lookup"
        )

    async def update_appointment_status(
        self, appointment_id: str, new_status: Union[str, AppointmentStatus]
    ) -> Appointment:
        """
        Move an appointment along its lifecycle.

        Cancelling frees the slot and, unless disabled, contacts matching
        waitlist entries.

        Raises:
            ValidationError: Unknown status or a transition the lifecycle forbids.
            NotFoundError: Unknown appointment.
            ConflictError: The status changed concurrently (retryable).
        """
        ensure_request_id()
        _require(appointment_id, "appointment_id")
        _require(new_status, "status")
        target = parse_status(new_status)
        current = await self.get_appointment(appointment_id)
        target = self.lifecycle.validate(current.status, target)

        updated = await self._call(
            self._appointments.update_status(appointment_id, target, current.status),
            "Appointment status update",
        )
        logger.info(
            "Appointment %s status: %s -> %s",
            appointment_id, current.status.value, updated.status.value,
        )

        if target == AppointmentStatus.CANCELLED and self.config.waitlist.auto_contact_on_cancel:
            try:
                await self.reconciler.reconcile_cancellation(updated)
            except SchedulingError:
                # The cancellation is committed; a retry would be rejected by the lifecycle.
                logger.exception("Waitlist reconciliation failed after cancelling %s", appointment_id)
        return updated

    # ------------------------------------------------------------------ #
    # Blocked time
    # ------------------------------------------------------------------ #

    async def create_blocked_time(
        self,
        staff_id: str,
        start_time: Union[datetime, str],
        end_time: Union[datetime, str],
        reason: Optional[str] = None,
        recurring: Union[Recurrence, dict, None] = None,
    ) -> BlockedTime:
        """Store a blocked-time series. Recurring occurrences are expanded on read."""
        ensure_request_id()
        _require(staff_id, "staff_id")
        start = ensure_aware(_parse_datetime(start_time, "start_time"), self._tz)
        end = ensure_aware(_parse_datetime(end_time, "end_time"), self._tz)

        rule: Optional[Recurrence] = None
        if recurring is not None:
            rule = _build(Recurrence, recurring)
            rule = rule.model_copy(update={"until": ensure_aware(rule.until, self._tz)})

        await self._require_staff(staff_id)
        record = _build(BlockedTime, {
            "staff_id": staff_id,
            "start_time": start,
            "end_time": end,
            "reason": reason,
            "recurring": rule,
        })
        stored = await self._call(
            self._blocked_times.create_blocked_time(record), "Blocked time create"
        )
        logger.info(
            "Blocked time %s created for staff %s: %s - %s%s",
            stored.id, staff_id, start.isoformat(), end.isoformat(),
            f" ({rule.frequency.value} until {rule.until.isoformat()})" if rule else "",
        )
        return stored

    async def list_blocked_intervals(
        self, staff_id: str, start: Union[datetime, str], end: Union[datetime, str]
    ) -> list[Interval]:
        """Concrete blocked occurrences for a staff member within ``[start, end)``."""
        ensure_request_id()
        _require(staff_id, "staff_id")
        start_dt = ensure_aware(_parse_datetime(start, "start"), self._tz)
        end_dt = ensure_aware(_parse_datetime(end, "end"), self._tz)
        if end_dt <= start_dt:
            raise ValidationError("end must be after start")
        records = await self._call(
            self._blocked_times.query_blocked_time(staff_id, start_dt, end_dt),
            "Blocked time lookup",
        )
        return expand_all(records, start_dt, end_dt, self._tz)

    async def delete_blocked_time(self, staff_id: str, start_time: Union[datetime, str]) -> None:
        """
        Delete blocked time starting at ``start_time``.

        A series origin deletes the whole series. A later occurrence of a
        recurring series is excluded from it, leaving the other occurrences.
        """
        ensure_request_id()
        _require(staff_id, "staff_id")
        start = ensure_aware(_parse_datetime(start_time, "start_time"), self._tz)
        deleted = await self._call(
            self._blocked_times.delete_blocked_time(staff_id, start), "Blocked time delete"
        )
        if deleted:
            logger.info("Blocked time deleted for staff %s at %s", staff_id, start.isoformat())
            return

        records = await self._call(
            self._blocked_times.query_blocked_time(staff_id, start, start + timedelta(minutes=1)),
            "Blocked time lookup",
        )
        series = next((r for r in records if is_later_occurrence(r, start, self._tz)), None)
        if series is None:
            raise NotFoundError("Blocked time", f"{staff_id}@{start.isoformat()}")
        excluded = series.model_copy(update={"excluded_starts": [*series.excluded_starts, start]})
        await self._call(self._blocked_times.create_blocked_time(excluded), "Blocked time update")
        logger.info(
            "Occurrence %s removed from blocked time %s for staff %s",
            start.isoformat(), series.id, staff_id,
        )

    # ------------------------------------------------------------------ #
    # Waitlist
    # ------------------------------------------------------------------ #

    async def add_to_waitlist(
        self,
        service_id: str,
        client: Union[ClientInfo, dict, None],
        preferred_dates: Sequence[Union[date, str]],
        preferred_staff_ids: Optional[Sequence[str]] = None,
        notes: Optional[str] = None,
    ) -> WaitlistEntry:
        ensure_request_id()
        _require(service_id, "service_id")
        _require(client, "client")
        if not preferred_dates:
            raise ValidationError("preferred_dates is required")

        entry = _build(WaitlistEntry, {
            "service_id": service_id,
            "client": client.model_dump() if isinstance(client, ClientInfo) else client,
            "preferred_dates": [_parse_date(d) for d in preferred_dates],
            "preferred_staff_ids": list(preferred_staff_ids or []),
            "notes": notes,
        })
        await self._require_service(service_id)
        stored = await self._call(self._waitlist.create_entry(entry), "Waitlist create")
        logger.info("Waitlist entry %s added for service %s", stored.id, service_id)
        return stored

    async def list_waitlist(
        self,
        status: Union[str, WaitlistStatus] = WaitlistStatus.ACTIVE,
        service_id: Optional[str] = None,
    ) -> list[WaitlistEntry]:
        ensure_request_id()
        return await self._call(
            self._waitlist.list_entries(parse_waitlist_status(status), service_id),
            "Waitlist lookup",
        )

    async def update_waitlist_status(
        self,
        entry_id: str,
        status: Union[str, WaitlistStatus],
        notes: Optional[str] = None,
    ) -> WaitlistEntry:
        ensure_request_id()
        _require(entry_id, "entry_id")
        _require(status, "status")
        entry = await self._call(self._waitlist.get_entry(entry_id), "Waitlist lookup")
        if entry is None:
            raise NotFoundError("Waitlist entry", entry_id)
        target = validate_waitlist_transition(entry.status, status)
        updated = await self._call(
            self._waitlist.update_entry(entry_id, target, notes, expected_status=entry.status),
            "Waitlist update",
        )
        logger.info("Waitlist entry %s: %s -> %s", entry_id, entry.status.value, target.value)
        return updated

    async def delete_waitlist_entry(self, entry_id: str) -> None:
        ensure_request_id()
        _require(entry_id, "entry_id")
        deleted = await self._call(self._waitlist.delete_entry(entry_id), "Waitlist delete")
        if not deleted:
            raise NotFoundError("Waitlist entry", entry_id)
