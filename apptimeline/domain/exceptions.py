"""
Domain-specific exception hierarchy for the timeline layout engine.
"""


class TimelineError(Exception):
    """Base class for all application-level errors."""


class InvalidAppointmentError(TimelineError):
    """Raised when an appointment record cannot be turned into an Appointment."""


class WorkingHoursError(TimelineError):
    """Raised when a working-hours entry cannot be parsed."""


class AppointmentSourceError(TimelineError):
    """Raised when appointment data cannot be fetched or parsed."""
