"""Pydantic schemas for entity validation and persistence."""

from clinicdesk.schemas.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentType,
    AppointmentUpdate,
)
from clinicdesk.schemas.consent import ConsentForm, ConsentFormSign
from clinicdesk.schemas.medical_record import (
    Coordinates,
    MedicalRecord,
    MedicalRecordCreate,
    MedicalRecordUpdate,
    Medication,
    RecordImage,
    RecordImageType,
    TreatmentPoint,
)
from clinicdesk.schemas.patient import Gender, Patient, PatientCreate, PatientUpdate

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "AppointmentStatus",
    "AppointmentType",
    "AppointmentUpdate",
    "ConsentForm",
    "ConsentFormSign",
    "Coordinates",
    "Gender",
    "MedicalRecord",
    "MedicalRecordCreate",
    "MedicalRecordUpdate",
    "Medication",
    "Patient",
    "PatientCreate",
    "PatientUpdate",
    "RecordImage",
    "RecordImageType",
    "TreatmentPoint",
]
