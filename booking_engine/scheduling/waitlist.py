"""
Waitlist status model and match-on-cancellation.

Entries move ``active -> contacted -> {booked, expired}``; an active entry
may also expire without being contacted. When an appointment is cancelled,
active entries for the same service whose preferred dates include the
freed day (and whose preferred staff, if any, include the staff member)
are moved to ``contacted``.
"""

from typing import Union

import pytz

from booking_engine.errors import ConflictError, ValidationError
from booking_engine.logging_context import get_request_logger
from booking_engine.scheduling.lifecycle import InvalidTransitionError
from booking_engine.schemas.booking_schema import Appointment
from booking_engine.schemas.waitlist_schema import WaitlistEntry, WaitlistStatus
from booking_engine.stores.base import WaitlistStore
from booking_engine.utils import call_with_timeout, local_date

logger = get_request_logger(__name__)

WAITLIST_TRANSITIONS: dict[WaitlistStatus, frozenset[WaitlistStatus]] = {
    WaitlistStatus.ACTIVE: frozenset({WaitlistStatus.CONTACTED, WaitlistStatus.EXPIRED}),
    WaitlistStatus.CONTACTED: frozenset({WaitlistStatus.BOOKED, WaitlistStatus.EXPIRED}),
    WaitlistStatus.BOOKED: frozenset(),
    WaitlistStatus.EXPIRED: frozenset(),
}


def parse_waitlist_status(value: Union[str, WaitlistStatus]) -> WaitlistStatus:
    try:
        return WaitlistStatus(value)
    except ValueError:
        allowed = [s.value for s in WaitlistStatus]
        raise ValidationError(
            f"Unknown waitlist status '{value}'. Allowed: {allowed}"
        ) from None


def validate_waitlist_transition(
    current: WaitlistStatus, target: Union[str, WaitlistStatus]
) -> WaitlistStatus:
    """Return the parsed target, or raise InvalidTransitionError."""
    target = parse_waitlist_status(target)
    allowed = WAITLIST_TRANSITIONS[current]
    if target not in allowed:
        raise InvalidTransitionError(
            f"No valid transition from '{current.value}' to '{target.value}'. "
            f"Valid targets: {sorted(s.value for s in allowed)}"
        )
    return target


def matches(entry: WaitlistEntry, appointment: Appointment, tz: pytz.BaseTzInfo) -> bool:
    """Whether a freed appointment slot suits a waitlist entry."""
    if entry.status != WaitlistStatus.ACTIVE or entry.service_id != appointment.service_id:
        return False
    if local_date(appointment.start_time, tz) not in entry.preferred_dates:
        return False
    return not entry.preferred_staff_ids or appointment.staff_id in entry.preferred_staff_ids


class WaitlistReconciler:
    """Contacts waiting clients when a matching slot is freed."""

    def __init__(self, store: WaitlistStore, tz: pytz.BaseTzInfo, timeout: float) -> None:
        self._store = store
        self._tz = tz
        self._timeout = timeout

    async def reconcile_cancellation(self, appointment: Appointment) -> list[WaitlistEntry]:
        """
        Move every matching active entry to ``contacted``, oldest first.

        Returns:
            The updated entries.
        """
        candidates = await call_with_timeout(
            self._store.list_entries(WaitlistStatus.ACTIVE, appointment.service_id),
            self._timeout,
            "Waitlist scan",
        )
        freed = appointment.start_time.astimezone(self._tz)
        note = (
            f"Slot freed {freed.strftime('%Y-%m-%d %H:%M')} "
            f"with staff {appointment.staff_id} (appointment {appointment.id})"
        )

        contacted: list[WaitlistEntry] = []
        for entry in sorted(candidates, key=lambda e: e.created_at):
            if not matches(entry, appointment, self._tz):
                continue
            try:
                updated = await call_with_timeout(
                    self._store.update_entry(
                        entry.id, WaitlistStatus.CONTACTED, note, expected_status=WaitlistStatus.ACTIVE
                    ),
                    self._timeout,
                    "Waitlist update",
                )
            except ConflictError as exc:
                logger.info("Skipping waitlist entry %s: %s", entry.id, exc.message)
                continue
            contacted.append(updated)

        if contacted:
            logger.info(
                "Cancellation of %s contacted %d waitlist entr%s",
                appointment.id, len(contacted), "y" if len(contacted) == 1 else "ies",
            )
        return contacted
