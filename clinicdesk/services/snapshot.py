"""Export and import of whole-store snapshots.

A snapshot carries all three collections under the keys ``patients``,
``medicalRecords`` and ``appointments``. Export copies the collections
verbatim. Import replaces each collection whose key is present and
well-formed with the entries exactly as given; absent keys and rejected
keys leave their collections untouched.
"""

import json
import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from clinicdesk.core.logging import audit_logger
from clinicdesk.schemas.appointment import Appointment
from clinicdesk.schemas.base import CamelModel
from clinicdesk.schemas.medical_record import MedicalRecord
from clinicdesk.schemas.patient import Patient
from clinicdesk.services.results import FieldError, SaveResult
from clinicdesk.services.store import Collection, DocumentStore
from clinicdesk.services.validation import validate_model

logger = logging.getLogger(__name__)

# Snapshot key -> (store collection, stored entity schema)
SNAPSHOT_COLLECTIONS: dict[str, tuple[Collection, type[CamelModel]]] = {
    "patients": (Collection.PATIENTS, Patient),
    "medicalRecords": (Collection.MEDICAL_RECORDS, MedicalRecord),
    "appointments": (Collection.APPOINTMENTS, Appointment),
}

Payload = Union[str, bytes, Mapping[str, Any]]


class SnapshotFormatError(Exception):
    """Raised when an import payload is not a JSON object."""

    pass


@dataclass
class ImportReport:
    """What an import applied and what it left alone.

    Attributes:
        imported: Entity count per applied snapshot key
        rejected: Errors of the keys that were not applied, prefixed with
            the snapshot key (``appointments.0.type``)
    """

    imported: dict[str, int] = field(default_factory=dict)
    rejected: list[FieldError] = field(default_factory=list)

    @property
    def rejected_keys(self) -> list[str]:
        return sorted({e.field.split(".", 1)[0] for e in self.rejected})


class SnapshotService:
    """Service for whole-store export and import."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def export_snapshot(self) -> dict[str, Any]:
        """All collections as stored, keyed by snapshot key."""
        return {
            key: self.store.read(collection, [])
            for key, (collection, _) in SNAPSHOT_COLLECTIONS.items()
        }

    def export_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.export_snapshot(), indent=indent, ensure_ascii=False)

    def import_snapshot(self, payload: Payload) -> SaveResult[ImportReport]:
        """Replace the collections present and well-formed in ``payload``.

        A key is applied only if its value is a list whose every entry
        validates and whose ids are unique. Applied entries are stored as
        given, and all applied collections are written in a single
        transaction. A null key counts as absent.

        Args:
            payload: JSON text (or bytes) or an already decoded mapping

        Returns:
            SaveResult with the ImportReport, or the write error (in which
            case nothing was applied)

        Raises:
            SnapshotFormatError: If the payload is not a JSON object
        """
        snapshot = self._decode(payload)

        report = ImportReport()
        documents: dict[Collection, list[Any]] = {}
        for key, (collection, schema) in SNAPSHOT_COLLECTIONS.items():
            entries = snapshot.get(key)
            if entries is None:
                continue
            if not isinstance(entries, list):
                report.rejected.append(FieldError(field=key, message=f"{key} must be a list"))
                continue

            errors = self._check_entries(key, schema, entries)
            if errors:
                report.rejected.extend(errors)
                continue
            documents[collection] = list(entries)
            report.imported[key] = len(entries)

        if report.rejected:
            logger.warning(
                f"Snapshot import left {', '.join(report.rejected_keys)} untouched: "
                f"{report.rejected[0].field}: {report.rejected[0].message}"
            )

        if not documents:
            logger.info("Snapshot import applied no collections")
            return SaveResult(value=report)

        # Fixed acquisition order across collections
        with ExitStack() as stack:
            for collection in sorted(documents, key=lambda c: c.value):
                stack.enter_context(self.store.lock(collection))
            result = self.store.write_many(documents)

        if not result.ok:
            return SaveResult(error=result.error)

        audit_logger.log(
            action="import",
            entity_type="snapshot",
            entity_id="-",
            metadata={**report.imported, "rejected": report.rejected_keys},
        )
        return SaveResult(value=report)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _decode(payload: Payload) -> Mapping[str, Any]:
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except ValueError as exc:
                logger.warning(f"Rejected snapshot import: not valid JSON ({exc})")
                raise SnapshotFormatError(f"Snapshot is not valid JSON: {exc}") from exc

        if not isinstance(payload, Mapping):
            logger.warning("Rejected snapshot import: top level is not an object")
            raise SnapshotFormatError("Snapshot must be a JSON object")
        return payload

    @staticmethod
    def _check_entries(
        key: str, schema: type[CamelModel], entries: list[Any]
    ) -> list[FieldError]:
        errors: list[FieldError] = []
        seen: set[str] = set()

        for index, entry in enumerate(entries):
            validation = validate_model(schema, entry)
            if not validation.success:
                errors.extend(
                    FieldError(
                        field=".".join(p for p in (key, str(index), e.field) if p),
                        message=e.message,
                    )
                    for e in validation.errors
                )
                continue

            entity_id = validation.value.id
            if entity_id in seen:
                errors.append(
                    FieldError(field=f"{key}.{index}.id", message=f"Duplicate id: {entity_id}")
                )
            seen.add(entity_id)

        return errors
