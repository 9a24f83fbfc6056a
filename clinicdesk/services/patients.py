"""Patient service: registration, edits, consent forms and deletion."""

from __future__ import annotations

import logging
from typing import Any, Optional

from clinicdesk.core.config import settings
from clinicdesk.schemas.base import new_id
from clinicdesk.schemas.consent import ConsentForm, ConsentFormSign
from clinicdesk.schemas.patient import Patient, PatientCreate, PatientUpdate
from clinicdesk.services.identifiers import next_patient_id
from clinicdesk.services.repositories import (
    AppointmentRepository,
    Clock,
    MedicalRecordRepository,
    PatientRepository,
)
from clinicdesk.services.results import SaveResult, WriteResult
from clinicdesk.services.store import Collection, DocumentStore
from clinicdesk.services.validation import validate_model
from clinicdesk.utils.time import utc_now

logger = logging.getLogger(__name__)


class PatientNotFoundError(Exception):
    """Raised when a patient id does not resolve to a stored patient."""

    pass


class PatientService:
    """Service for managing patients and their embedded consent form."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = utc_now,
        cascade_delete: Optional[bool] = None,
        agreement_text: Optional[str] = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.patients = PatientRepository(store, clock)
        self.records = MedicalRecordRepository(store, clock)
        self.appointments = AppointmentRepository(store, clock)
        self.cascade_delete = (
            settings.cascade_patient_delete if cascade_delete is None else cascade_delete
        )
        self.agreement_text = agreement_text or settings.consent_agreement_text

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self) -> list[Patient]:
        return self.patients.list()

    def get(self, patient_id: str) -> Optional[Patient]:
        return self.patients.get(patient_id)

    def search(self, term: str = "", descending: bool = False) -> list[Patient]:
        """Patients whose first name, last name or initials contain ``term``.

        Matching is case-insensitive; results are ordered by last name.
        """
        needle = term.casefold()
        matches = [
            p
            for p in self.patients.list()
            if needle in p.first_name.casefold()
            or needle in p.last_name.casefold()
            or needle in p.initials.casefold()
        ]
        return sorted(matches, key=lambda p: p.last_name.casefold(), reverse=descending)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, data: Any) -> SaveResult[Patient]:
        """Validate ``data`` and register a new patient under the next id.

        Raises:
            PatientIdCapacityError: If no id is left for the current year
        """
        validation = validate_model(PatientCreate, data)
        if not validation.success:
            return SaveResult.invalid(validation.errors)

        # Hold the collection so two creations cannot pick the same id
        with self.store.lock(Collection.PATIENTS):
            patient_id = next_patient_id(self.patients.ids(), now=self.clock())
            patient = Patient(id=patient_id, **validation.value.model_dump())
            result = self.patients.upsert(patient)

        if result.success:
            logger.info(f"Registered patient {patient_id}", extra={"entity_id": patient_id})
        return result

    def update(self, patient_id: str, data: Any) -> SaveResult[Patient]:
        """Apply a partial update; the id itself cannot change.

        Raises:
            PatientNotFoundError: If the patient does not exist
        """
        validation = validate_model(PatientUpdate, data)
        if not validation.success:
            return SaveResult.invalid(validation.errors)

        with self.store.lock(Collection.PATIENTS):
            current = self._require(patient_id)
            changes = validation.value.model_dump(by_alias=True, exclude_unset=True)
            merged = validate_model(Patient, {**current.model_dump(by_alias=True), **changes})
            if not merged.success:
                return SaveResult.invalid(merged.errors)
            return self.patients.upsert(merged.value)

    def sign_consent(self, patient_id: str, data: Any) -> SaveResult[Patient]:
        """Attach a signed consent form, replacing any previous one.

        Raises:
            PatientNotFoundError: If the patient does not exist
        """
        validation = validate_model(ConsentFormSign, data)
        if not validation.success:
            return SaveResult.invalid(validation.errors)

        consent = ConsentForm(
            **validation.value.model_dump(),
            id=new_id(),
            signed_at=self.clock(),
            agreement_text=self.agreement_text,
        )

        with self.store.lock(Collection.PATIENTS):
            current = self._require(patient_id)
            return self.patients.upsert(current.model_copy(update={"consent_form": consent}))

    def clear_consent(self, patient_id: str) -> SaveResult[Patient]:
        """Remove the patient's consent form.

        Raises:
            PatientNotFoundError: If the patient does not exist
        """
        with self.store.lock(Collection.PATIENTS):
            current = self._require(patient_id)
            return self.patients.upsert(current.model_copy(update={"consent_form": None}))

    def delete(self, patient_id: str, cascade: Optional[bool] = None) -> WriteResult:
        """Delete a patient.

        With ``cascade`` the patient's medical records and appointments are
        deleted first; without it they stay behind as orphans. When
        ``cascade`` is None the configured default applies.
        """
        cascade = self.cascade_delete if cascade is None else cascade

        if cascade:
            for repository in (self.records, self.appointments):
                result = repository.delete_for_patient(patient_id)
                if not result.ok:
                    return result

        return self.patients.delete_by_id(patient_id)

    def _require(self, patient_id: str) -> Patient:
        patient = self.patients.get(patient_id)
        if patient is None:
            raise PatientNotFoundError(f"Patient not found: {patient_id}")
        return patient
