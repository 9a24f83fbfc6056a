"""Medical record service."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

from clinicdesk.core.config import settings
from clinicdesk.schemas.base import new_id
from clinicdesk.schemas.medical_record import (
    MedicalRecord,
    MedicalRecordCreate,
    MedicalRecordUpdate,
)
from clinicdesk.services.patients import PatientNotFoundError
from clinicdesk.services.repositories import Clock, MedicalRecordRepository, PatientRepository
from clinicdesk.services.results import SaveResult, WriteResult
from clinicdesk.services.store import Collection, DocumentStore
from clinicdesk.services.validation import validate_model
from clinicdesk.utils.time import utc_now


class RecordNotFoundError(Exception):
    """Raised when a medical record id does not resolve to a stored record."""

    pass


class MedicalRecordService:
    """Service for creating and maintaining medical records."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = utc_now,
        enforce_references: Optional[bool] = None,
        default_provider: Optional[str] = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.records = MedicalRecordRepository(store, clock)
        self.patients = PatientRepository(store, clock)
        self.enforce_references = (
            settings.enforce_patient_references
            if enforce_references is None
            else enforce_references
        )
        self.default_provider = (
            settings.default_provider if default_provider is None else default_provider
        )

    def list(self, patient_id: Optional[str] = None) -> list[MedicalRecord]:
        """Records in stored order, optionally for one patient only."""
        return self.records.list(patient_id)

    def get(self, record_id: str) -> Optional[MedicalRecord]:
        return self.records.get(record_id)

    def list_for_patient(self, patient_id: str) -> list[MedicalRecord]:
        """A patient's records, most recent visit first."""
        return sorted(self.records.list(patient_id), key=lambda r: r.date, reverse=True)

    def last_visit(self, patient_id: str) -> Optional[date]:
        records = self.list_for_patient(patient_id)
        return records[0].date if records else None

    def create(self, data: Any) -> SaveResult[MedicalRecord]:
        """Validate ``data`` and store it as a new record.

        Medications, treatment points and images without an id get one;
        images without an upload time are stamped with the current time.

        Raises:
            PatientNotFoundError: If reference checks are on and the patient
                does not exist
        """
        if self.default_provider and isinstance(data, Mapping) and not data.get("provider"):
            data = {**data, "provider": self.default_provider}

        validation = validate_model(MedicalRecordCreate, data)
        if not validation.success:
            return SaveResult.invalid(validation.errors)

        self._check_patient(validation.value.patient_id)

        record = MedicalRecord(id=new_id(), **validation.value.model_dump())
        return self.records.upsert(self._stamp_images(record))

    def update(self, record_id: str, data: Any) -> SaveResult[MedicalRecord]:
        """Apply a partial update; the patient link cannot change.

        Raises:
            RecordNotFoundError: If the record does not exist
        """
        validation = validate_model(MedicalRecordUpdate, data)
        if not validation.success:
            return SaveResult.invalid(validation.errors)

        with self.store.lock(Collection.MEDICAL_RECORDS):
            current = self.records.get(record_id)
            if current is None:
                raise RecordNotFoundError(f"Medical record not found: {record_id}")

            # Top-level fields only; nested items keep the ids they were validated with
            changes = validation.value.model_dump(
                by_alias=True, include=validation.value.model_fields_set
            )
            merged = validate_model(
                MedicalRecord, {**current.model_dump(by_alias=True), **changes}
            )
            if not merged.success:
                return SaveResult.invalid(merged.errors)
            return self.records.upsert(self._stamp_images(merged.value, current))

    def delete(self, record_id: str) -> WriteResult:
        return self.records.delete_by_id(record_id)

    def _stamp_images(
        self, record: MedicalRecord, previous: Optional[MedicalRecord] = None
    ) -> MedicalRecord:
        """Fill missing upload times from the stored image, or with now."""
        if all(image.uploaded_at for image in record.images):
            return record
        known = {image.id: image.uploaded_at for image in previous.images} if previous else {}
        now = self.clock()
        images = [
            image
            if image.uploaded_at
            else image.model_copy(update={"uploaded_at": known.get(image.id) or now})
            for image in record.images
        ]
        return record.model_copy(update={"images": images})

    def _check_patient(self, patient_id: str) -> None:
        if self.enforce_references and not self.patients.exists(patient_id):
            raise PatientNotFoundError(f"Patient not found: {patient_id}")
