"""Schema validation for every entity kind.

All entity kinds go through the same path: the candidate is validated with
its pydantic schema and every violated field is reported, in schema
declaration order, with the fixed message the schema declares for it.
Validation never mutates the candidate.
"""

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import ErrorDetails

from clinicdesk.schemas.appointment import AppointmentCreate, AppointmentUpdate
from clinicdesk.schemas.base import CamelModel
from clinicdesk.schemas.consent import ConsentFormSign
from clinicdesk.schemas.medical_record import MedicalRecordCreate, MedicalRecordUpdate
from clinicdesk.schemas.patient import PatientCreate, PatientUpdate
from clinicdesk.services.results import FieldError, ValidationResult

M = TypeVar("M", bound=CamelModel)


class EntityKind(str, Enum):
    """Validated payload kinds."""

    PATIENT = "patient"
    PATIENT_UPDATE = "patient_update"
    CONSENT_FORM = "consent_form"
    MEDICAL_RECORD = "medical_record"
    MEDICAL_RECORD_UPDATE = "medical_record_update"
    APPOINTMENT = "appointment"
    APPOINTMENT_UPDATE = "appointment_update"


SCHEMAS: dict[EntityKind, type[CamelModel]] = {
    EntityKind.PATIENT: PatientCreate,
    EntityKind.PATIENT_UPDATE: PatientUpdate,
    EntityKind.CONSENT_FORM: ConsentFormSign,
    EntityKind.MEDICAL_RECORD: MedicalRecordCreate,
    EntityKind.MEDICAL_RECORD_UPDATE: MedicalRecordUpdate,
    EntityKind.APPOINTMENT: AppointmentCreate,
    EntityKind.APPOINTMENT_UPDATE: AppointmentUpdate,
}


def validate(kind: EntityKind | str, candidate: Any) -> ValidationResult:
    """Validate ``candidate`` as an entity of ``kind``.

    Args:
        kind: Entity kind (or its string value)
        candidate: Mapping with camelCase (or snake_case) keys, or a model

    Returns:
        ValidationResult with the typed value, or the ordered field errors
    """
    return validate_model(SCHEMAS[EntityKind(kind)], candidate)


def validate_model(schema: type[M], candidate: Any) -> ValidationResult[M]:
    """Validate ``candidate`` against ``schema``."""
    if isinstance(candidate, BaseModel):
        candidate = candidate.model_dump(by_alias=True)

    try:
        value = schema.model_validate(candidate)
    except ValidationError as exc:
        return ValidationResult(
            errors=[_to_field_error(schema, error) for error in exc.errors()]
        )

    return ValidationResult(value=value)


def _is_blank(error: ErrorDetails) -> bool:
    if error["type"] == "missing":
        return True
    value = error.get("input")
    return value is None or (isinstance(value, str) and not value.strip())


def _to_field_error(schema: type[CamelModel], error: ErrorDetails) -> FieldError:
    loc = error["loc"]
    path = ".".join(str(part) for part in loc)
    # Message lookup ignores list positions: medications.0.batch -> medications.batch
    key = ".".join(str(part) for part in loc if not isinstance(part, int))

    if not loc:
        return FieldError(field="", message="Expected an object")

    if _is_blank(error):
        label = key.rsplit(".", 1)[-1]
        message = schema.required_messages.get(key, f"{label} is required")
    else:
        message = schema.invalid_messages.get(key, error["msg"])

    return FieldError(field=path, message=message)
