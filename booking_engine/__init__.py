"""Availability and scheduling engine for appointment-based service businesses."""

__version__ = "0.1.0"
