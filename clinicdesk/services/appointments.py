"""Appointment service: booking, rescheduling and the upcoming list.

Status is derived from the start time whenever an appointment is saved and
stored as a snapshot; it is not recomputed when appointments are read.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from clinicdesk.core.config import settings
from clinicdesk.schemas.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentType,
    AppointmentUpdate,
)
from clinicdesk.schemas.base import new_id
from clinicdesk.schemas.patient import Patient
from clinicdesk.services.patients import PatientNotFoundError
from clinicdesk.services.repositories import AppointmentRepository, Clock, PatientRepository
from clinicdesk.services.results import SaveResult, WriteResult
from clinicdesk.services.status import derive_status
from clinicdesk.services.store import Collection, DocumentStore
from clinicdesk.services.validation import validate_model
from clinicdesk.utils.time import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class AppointmentNotFoundError(Exception):
    """Raised when an appointment id does not resolve to a stored appointment."""

    pass


def build_title(patient: Optional[Patient], appointment_type: AppointmentType) -> str:
    """Calendar title, e.g. ``Jansen, A.B. - Treatment``."""
    if patient is None:
        return appointment_type.value
    return f"{patient.display_name} - {appointment_type.value}"


class AppointmentService:
    """Service for managing appointments."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = utc_now,
        enforce_references: Optional[bool] = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.appointments = AppointmentRepository(store, clock)
        self.patients = PatientRepository(store, clock)
        self.enforce_references = (
            settings.enforce_patient_references
            if enforce_references is None
            else enforce_references
        )

    def list(self, patient_id: Optional[str] = None) -> list[Appointment]:
        """Appointments in stored order, optionally for one patient only."""
        return self.appointments.list(patient_id)

    def get(self, appointment_id: str) -> Optional[Appointment]:
        return self.appointments.get(appointment_id)

    def upcoming(self, now: Optional[datetime] = None) -> list[Appointment]:
        """Appointments whose start is not in the past, soonest first.

        Decided from the start time, never from the stored status.
        """
        reference = ensure_utc(now) if now is not None else self.clock()
        pending = [a for a in self.appointments.list() if a.start >= reference]
        return sorted(pending, key=lambda a: a.start)

    def create(self, data: Any) -> SaveResult[Appointment]:
        """Validate ``data`` and book a new appointment.

        Raises:
            PatientNotFoundError: If reference checks are on and the patient
                does not exist
        """
        validation = validate_model(AppointmentCreate, data)
        if not validation.success:
            return SaveResult.invalid(validation.errors)

        booking = validation.value
        patient = self._resolve_patient(booking.patient_id)

        appointment = Appointment(
            **booking.model_dump(),
            id=new_id(),
            title=build_title(patient, booking.type),
            status=derive_status(booking.start, self.clock()),
        )
        return self.appointments.upsert(appointment)

    def update(self, appointment_id: str, data: Any) -> SaveResult[Appointment]:
        """Apply a partial update and re-derive status and title.

        Raises:
            AppointmentNotFoundError: If the appointment does not exist
            PatientNotFoundError: If the appointment is moved to an unknown
                patient while reference checks are on
        """
        validation = validate_model(AppointmentUpdate, data)
        if not validation.success:
            return SaveResult.invalid(validation.errors)

        with self.store.lock(Collection.APPOINTMENTS):
            current = self.appointments.get(appointment_id)
            if current is None:
                raise AppointmentNotFoundError(f"Appointment not found: {appointment_id}")

            changes = validation.value.model_dump(by_alias=True, exclude_unset=True)
            merged = validate_model(
                AppointmentCreate, {**current.model_dump(by_alias=True), **changes}
            )
            if not merged.success:
                return SaveResult.invalid(merged.errors)

            booking = merged.value
            patient = self._resolve_patient(booking.patient_id)
            title = build_title(patient, booking.type) if patient else current.title

            appointment = current.model_copy(
                update={
                    **booking.model_dump(),
                    "title": title,
                    "status": derive_status(booking.start, self.clock()),
                }
            )
            return self.appointments.upsert(appointment)

    def delete(self, appointment_id: str) -> WriteResult:
        return self.appointments.delete_by_id(appointment_id)

    def _resolve_patient(self, patient_id: str) -> Optional[Patient]:
        patient = self.patients.get(patient_id)
        if patient is None and self.enforce_references:
            raise PatientNotFoundError(f"Patient not found: {patient_id}")
        if patient is None:
            logger.warning(
                f"Appointment references unknown patient {patient_id}",
                extra={"entity_id": patient_id},
            )
        return patient
