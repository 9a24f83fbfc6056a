"""FastAPI dependency injection utilities."""

from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status

from clinicdesk.services.appointments import AppointmentService
from clinicdesk.services.medical_records import MedicalRecordService
from clinicdesk.services.patients import PatientService
from clinicdesk.services.results import SaveResult, WriteResult
from clinicdesk.services.snapshot import SnapshotService
from clinicdesk.services.store import DocumentStore


@lru_cache
def get_store() -> DocumentStore:
    """Get the process-wide document store.

    Built on first use from ``settings.database_url``; tests override this
    dependency with a store over an in-memory engine.
    """
    return DocumentStore.from_url()


Store = Annotated[DocumentStore, Depends(get_store)]


def get_patient_service(store: Store) -> PatientService:
    return PatientService(store)


def get_medical_record_service(store: Store) -> MedicalRecordService:
    return MedicalRecordService(store)


def get_appointment_service(store: Store) -> AppointmentService:
    return AppointmentService(store)


def get_snapshot_service(store: Store) -> SnapshotService:
    return SnapshotService(store)


Patients = Annotated[PatientService, Depends(get_patient_service)]
MedicalRecords = Annotated[MedicalRecordService, Depends(get_medical_record_service)]
Appointments = Annotated[AppointmentService, Depends(get_appointment_service)]
Snapshots = Annotated[SnapshotService, Depends(get_snapshot_service)]


def unwrap(result: SaveResult[Any]) -> dict[str, Any]:
    """Turn a service result into a response document.

    Raises:
        HTTPException: 422 with the field errors, or 503 if the store
            could not persist the change
    """
    if result.errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[e.as_dict() for e in result.errors],
        )
    if result.error is not None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=result.error,
        )
    return result.value.to_document()


def ensure_written(result: WriteResult) -> None:
    """Raise 503 if a delete could not be persisted."""
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=result.error,
        )
