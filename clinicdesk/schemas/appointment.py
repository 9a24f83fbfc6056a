"""Pydantic schemas for appointment operations."""

from enum import Enum
from typing import ClassVar, Optional

from clinicdesk.schemas.base import CamelModel, RequiredText, Timestamp


class AppointmentType(str, Enum):
    """Kind of visit booked."""

    CONSULTATION = "Consultation"
    TREATMENT = "Treatment"
    FOLLOW_UP = "Follow-up"


class AppointmentStatus(str, Enum):
    """Appointment status.

    Only SCHEDULED and COMPLETED are ever derived; CANCELLED is accepted from
    stored or imported data.
    """

    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


APPOINTMENT_REQUIRED_MESSAGES = {
    "patientId": "Patient is required",
    "type": "Appointment type is required",
    "start": "Start time is required",
    "end": "End time is required",
}

APPOINTMENT_INVALID_MESSAGES = {
    "type": "Appointment type must be one of: Consultation, Treatment, Follow-up",
    "start": "Invalid start time",
    "end": "Invalid end time",
    "status": "Status must be one of: Scheduled, Completed, Cancelled",
}


class AppointmentCreate(CamelModel):
    """Schema for booking an appointment.

    ``end`` is expected to be after ``start`` but this is not enforced.
    """

    patient_id: RequiredText
    type: AppointmentType
    start: Timestamp
    end: Timestamp
    notes: Optional[str] = None

    required_messages: ClassVar[dict[str, str]] = APPOINTMENT_REQUIRED_MESSAGES
    invalid_messages: ClassVar[dict[str, str]] = APPOINTMENT_INVALID_MESSAGES


class AppointmentUpdate(CamelModel):
    """Schema for editing an appointment (all fields optional)."""

    patient_id: Optional[RequiredText] = None
    type: Optional[AppointmentType] = None
    start: Optional[Timestamp] = None
    end: Optional[Timestamp] = None
    notes: Optional[str] = None

    required_messages: ClassVar[dict[str, str]] = APPOINTMENT_REQUIRED_MESSAGES
    invalid_messages: ClassVar[dict[str, str]] = APPOINTMENT_INVALID_MESSAGES


class Appointment(AppointmentCreate):
    """Stored appointment.

    ``title`` is derived from the patient's name when the appointment is
    saved and is not refreshed when the patient is renamed. ``status`` is a
    snapshot taken at the same moment.
    """

    id: RequiredText
    title: str
    status: AppointmentStatus
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None
