"""Business logic services."""

from clinicdesk.services.appointments import AppointmentNotFoundError, AppointmentService
from clinicdesk.services.identifiers import PatientIdCapacityError, next_patient_id
from clinicdesk.services.medical_records import MedicalRecordService, RecordNotFoundError
from clinicdesk.services.patients import PatientNotFoundError, PatientService
from clinicdesk.services.results import FieldError, SaveResult, ValidationResult, WriteResult
from clinicdesk.services.snapshot import ImportReport, SnapshotFormatError, SnapshotService
from clinicdesk.services.status import derive_status
from clinicdesk.services.store import Collection, DocumentStore
from clinicdesk.services.validation import EntityKind, validate

__all__ = [
    "AppointmentNotFoundError",
    "AppointmentService",
    "Collection",
    "DocumentStore",
    "EntityKind",
    "FieldError",
    "ImportReport",
    "MedicalRecordService",
    "PatientIdCapacityError",
    "PatientNotFoundError",
    "PatientService",
    "RecordNotFoundError",
    "SaveResult",
    "SnapshotFormatError",
    "SnapshotService",
    "ValidationResult",
    "WriteResult",
    "derive_status",
    "next_patient_id",
    "validate",
]
