"""
Finite state machine for appointment status.

Appointments start as ``requested`` and move forward only:

    requested -> confirmed -> {completed, cancelled, no_show}
    requested -> cancelled

Every other transition, including re-entering the current status or leaving
a terminal status, is rejected with a clear error listing what is allowed.

Usage:
    lifecycle = AppointmentLifecycle()
    lifecycle.validate(AppointmentStatus.REQUESTED, AppointmentStatus.CONFIRMED)
"""

import logging
from dataclasses import dataclass
from typing import Union

from booking_engine.errors import ValidationError
from booking_engine.schemas.booking_schema import AppointmentStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_state: AppointmentStatus
    to_state: AppointmentStatus


class InvalidTransitionError(ValidationError):
    """Raised when a transition is not valid from the current status."""


def parse_status(value: Union[str, AppointmentStatus]) -> AppointmentStatus:
    """Coerce a raw status string into the closed enum."""
    try:
        return AppointmentStatus(value)
    except ValueError:
        allowed = [s.value for s in AppointmentStatus]
        raise ValidationError(
            f"Unknown appointment status '{value}'. Allowed: {allowed}"
        ) from None


class AppointmentLifecycle:
    """Transition table governing appointment status after creation."""

    INITIAL = AppointmentStatus.REQUESTED

    TRANSITIONS: list[Transition] = [
        # --- Confirmation ---
        Transition(AppointmentStatus.REQUESTED, AppointmentStatus.CONFIRMED),
        Transition(AppointmentStatus.REQUESTED, AppointmentStatus.CANCELLED),

        # --- Outcome ---
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED),
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED),
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.NO_SHOW),
    ]

    TERMINAL = frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    })

    def valid_targets(self, current: AppointmentStatus) -> list[AppointmentStatus]:
        """Return all statuses reachable in one step from ``current``."""
        return [t.to_state for t in self.TRANSITIONS if t.from_state == current]

    def can_transition(self, current: AppointmentStatus, target: AppointmentStatus) -> bool:
        return any(
            t.from_state == current and t.to_state == target for t in self.TRANSITIONS
        )

    def validate(
        self, current: AppointmentStatus, target: Union[str, AppointmentStatus]
    ) -> AppointmentStatus:
        """
        Check a requested transition.

        Returns:
            The parsed target status.

        Raises:
            ValidationError: If ``target`` is not a known status.
            InvalidTransitionError: If no transition exists from ``current``.
        """
        target = parse_status(target)
        if not self.can_transition(current, target):
            valid = [s.value for s in self.valid_targets(current)]
            raise InvalidTransitionError(
                f"No valid transition from '{current.value}' to '{target.value}'. "
                f"Valid targets: {valid}"
            )
        logger.debug("Status transition: %s -> %s", current.value, target.value)
        return target

    def is_terminal(self, status: AppointmentStatus) -> bool:
        return status in self.TERMINAL
