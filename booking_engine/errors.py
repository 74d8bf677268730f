"""Error kinds surfaced by the scheduling engine.

Callers branch on the class (or on ``retryable``): validation and
not-found errors are final, conflicts and transient failures can be
retried after re-fetching availability.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base exception for scheduling engine failures."""

    retryable: bool = False

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(SchedulingError):
    """Missing or malformed input, or a rejected state transition."""


class NotFoundError(SchedulingError):
    """A service, staff member, appointment or other record does not resolve."""

    def __init__(self, kind: str, identifier: str, *, cause: Optional[Exception] = None):
        super().__init__(f"{kind} not found: {identifier}", cause=cause)
        self.kind = kind
        self.identifier = identifier


class ConflictError(SchedulingError):
    """The requested slot overlaps an existing appointment or blocked time."""

    retryable = True


class TransientError(SchedulingError):
    """A collaborator timed out or was unreachable."""

    retryable = True
