"""
Appointment confirmation notifications.

The default notifier only logs; a mail or SMS sender can be plugged in by
implementing the ``Notifier`` protocol from ``booking_engine.stores.base``.
"""

from typing import Optional

import pytz

from booking_engine.config import settings
from booking_engine.logging_context import get_request_logger
from booking_engine.schemas.booking_schema import Appointment
from booking_engine.schemas.scheduling_schema import Service, StaffMember

logger = get_request_logger(__name__)


def build_confirmation_message(
    appointment: Appointment,
    service: Service,
    staff: StaffMember,
    tz: pytz.BaseTzInfo,
    business_name: str,
) -> str:
    """Plain-text confirmation for the client."""
    local_start = appointment.start_time.astimezone(tz)
    return (
        f"Hi {appointment.client.name}, your {service.name or service.id} with "
        f"{staff.name or staff.id} at {business_name} is requested for "
        f"{local_start.strftime('%A %d %B %Y at %H:%M')} "
        f"({appointment.total_duration} min, ${appointment.total_price}). "
        f"Reference: {appointment.id}."
    )


class LoggingNotifier:
    """Records confirmations in the log instead of sending them."""

    def __init__(
        self, tz: Optional[pytz.BaseTzInfo] = None, business_name: Optional[str] = None
    ) -> None:
        self._tz = tz or settings.scheduling.tz
        self._business_name = business_name or settings.business.name
        self.sent: list[str] = []

    async def send_appointment_confirmation(
        self, appointment: Appointment, service: Service, staff: StaffMember
    ) -> None:
        message = build_confirmation_message(
            appointment, service, staff, self._tz, self._business_name
        )
        self.sent.append(message)
        logger.info("Confirmation for %s to %s: %s", appointment.id, appointment.client.email, message)
