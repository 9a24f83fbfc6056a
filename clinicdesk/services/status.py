"""Appointment status derivation."""

from datetime import datetime

from clinicdesk.schemas.appointment import AppointmentStatus
from clinicdesk.utils.time import ensure_utc, parse_datetime


def _as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, str):
        return parse_datetime(value)
    return ensure_utc(value)


def derive_status(start: datetime | str, now: datetime | str) -> AppointmentStatus:
    """Derive the status of an appointment from its start time.

    The result is stored as a snapshot when the appointment is saved; it is
    not recomputed on read.

    Args:
        start: Appointment start
        now: Reference time

    Returns:
        COMPLETED if ``start`` is strictly before ``now``, else SCHEDULED

    Examples:
        >>> derive_status("2099-01-01T00:00:00Z", "2024-06-01T12:00:00Z")
        <AppointmentStatus.SCHEDULED: 'Scheduled'>
        >>> derive_status("2000-01-01T00:00:00Z", "2024-06-01T12:00:00Z")
        <AppointmentStatus.COMPLETED: 'Completed'>
    """
    if _as_datetime(start) < _as_datetime(now):
        return AppointmentStatus.COMPLETED
    return AppointmentStatus.SCHEDULED
