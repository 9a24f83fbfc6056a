"""Entity repositories layered on the document store.

Every repository reads the whole collection, computes the new state in
memory and writes the whole collection back. There is no index: filtering
by patient is an exact-equality scan that keeps stored (insertion) order.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

from pydantic import ValidationError

from clinicdesk.core.logging import audit_logger
from clinicdesk.schemas.appointment import Appointment
from clinicdesk.schemas.base import CamelModel
from clinicdesk.schemas.medical_record import MedicalRecord
from clinicdesk.schemas.patient import Patient
from clinicdesk.services.results import SaveResult, WriteResult
from clinicdesk.services.store import Collection, DocumentStore
from clinicdesk.utils.time import parse_datetime, utc_now

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=CamelModel)

Clock = Callable[[], datetime]


class CollectionRepository(Generic[E]):
    """Upsert, delete and list for one collection."""

    collection: ClassVar[Collection]
    model: ClassVar[type[CamelModel]]
    entity_type: ClassVar[str]

    def __init__(self, store: DocumentStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[E]:
        """All readable entities, in stored order."""
        return self._parse_all(self._read_documents())

    def get(self, entity_id: str) -> Optional[E]:
        """Entity with ``entity_id``, or None."""
        for document in self._read_documents():
            if document.get("id") == entity_id:
                return self._parse(document)
        return None

    def exists(self, entity_id: str) -> bool:
        return any(d.get("id") == entity_id for d in self._read_documents())

    def ids(self) -> list[str]:
        """Stored ids, including those of entries that fail to parse."""
        return [d["id"] for d in self._read_documents() if isinstance(d.get("id"), str)]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, entity: E) -> SaveResult[E]:
        """Insert ``entity`` or replace the stored entity with the same id.

        Replacing keeps the stored ``createdAt`` and refreshes ``updatedAt``;
        inserting stamps both with the current time and appends.
        """
        with self.store.lock(self.collection):
            entries = self._read_entries()
            if entries is None:
                return SaveResult(error=self._not_a_list_error())
            now = self.clock()

            index = next(
                (i for i, e in enumerate(entries) if _entry_field(e, "id") == entity.id),
                None,
            )
            if index is None:
                created_at = now
            else:
                created_at = _stored_timestamp(entries[index].get("createdAt"))
                created_at = created_at or entity.created_at or now

            saved = entity.model_copy(update={"created_at": created_at, "updated_at": now})
            document = saved.to_document()

            if index is None:
                entries.append(document)
            else:
                entries[index] = document

            result = self.store.write(self.collection, entries)

        if result.ok:
            audit_logger.log(
                action="create" if index is None else "update",
                entity_type=self.entity_type,
                entity_id=entity.id,
            )
        return SaveResult.from_write(result, saved)

    def delete_by_id(self, entity_id: str) -> WriteResult:
        """Remove the entity with ``entity_id``; a missing id is a no-op."""
        with self.store.lock(self.collection):
            entries = self._read_entries()
            if entries is None:
                return WriteResult.failure(self._not_a_list_error())
            remaining = [e for e in entries if _entry_field(e, "id") != entity_id]
            if len(remaining) == len(entries):
                return WriteResult.success()
            result = self.store.write(self.collection, remaining)

        if result.ok:
            audit_logger.log(action="delete", entity_type=self.entity_type, entity_id=entity_id)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_entries(self) -> Optional[list[Any]]:
        """Stored entries exactly as written, or None if the document is not a list."""
        entries = self.store.read(self.collection, [])
        if not isinstance(entries, list):
            logger.warning(
                f"Collection {self.collection.value} is not a list",
                extra={"collection": self.collection.value},
            )
            return None
        return entries

    def _read_documents(self) -> list[dict[str, Any]]:
        # Non-object entries cannot carry an id; keep them out of lookups only
        return [e for e in self._read_entries() or [] if isinstance(e, dict)]

    def _not_a_list_error(self) -> str:
        return f"Collection {self.collection.value} is not a list; refusing to overwrite it"

    def _parse(self, document: dict[str, Any]) -> Optional[E]:
        try:
            return self.model.model_validate(document)
        except ValidationError as exc:
            logger.warning(
                f"Skipping unreadable {self.entity_type} {document.get('id')!r}: "
                f"{exc.error_count()} validation error(s)",
                extra={"collection": self.collection.value, "entity_id": document.get("id")},
            )
            return None

    def _parse_all(self, documents: list[dict[str, Any]]) -> list[E]:
        entities = (self._parse(d) for d in documents)
        return [e for e in entities if e is not None]


class PatientOwnedRepository(CollectionRepository[E]):
    """Repository for entities that reference a patient by ``patientId``."""

    def list(self, patient_id: Optional[str] = None) -> list[E]:
        """Entities in stored order, optionally only those of ``patient_id``."""
        documents = self._read_documents()
        if patient_id is not None:
            documents = [d for d in documents if d.get("patientId") == patient_id]
        return self._parse_all(documents)

    def delete_for_patient(self, patient_id: str) -> WriteResult:
        """Remove every entity referencing ``patient_id``."""
        with self.store.lock(self.collection):
            entries = self._read_entries()
            if entries is None:
                return WriteResult.failure(self._not_a_list_error())
            removed = [e.get("id") for e in entries if _entry_field(e, "patientId") == patient_id]
            if not removed:
                return WriteResult.success()
            remaining = [e for e in entries if _entry_field(e, "patientId") != patient_id]
            result = self.store.write(self.collection, remaining)

        if result.ok:
            for entity_id in removed:
                audit_logger.log(
                    action="delete",
                    entity_type=self.entity_type,
                    entity_id=str(entity_id),
                    metadata={"cascade_from_patient": patient_id},
                )
        return result


class PatientRepository(CollectionRepository[Patient]):
    collection = Collection.PATIENTS
    model = Patient
    entity_type = "patient"


class MedicalRecordRepository(PatientOwnedRepository[MedicalRecord]):
    collection = Collection.MEDICAL_RECORDS
    model = MedicalRecord
    entity_type = "medical_record"


class AppointmentRepository(PatientOwnedRepository[Appointment]):
    collection = Collection.APPOINTMENTS
    model = Appointment
    entity_type = "appointment"


def _entry_field(entry: Any, name: str) -> Any:
    return entry.get(name) if isinstance(entry, dict) else None


def _stored_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        return None
