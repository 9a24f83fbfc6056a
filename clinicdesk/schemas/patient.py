"""Pydantic schemas for patient operations.

Includes schemas for:
- Patient creation (the validated field set)
- Partial updates
- The stored patient record with its embedded consent form
"""

from datetime import date
from enum import Enum
from typing import Annotated, ClassVar, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, Field

from clinicdesk.schemas.base import CamelModel, RequiredText, Timestamp
from clinicdesk.schemas.consent import ConsentForm

PATIENT_ID_PATTERN = r"^\d{4}-\d{3}$"


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(str(exc)) from exc
    return value


# Syntax-checked address, stored exactly as entered (no normalization)
EmailAddress = Annotated[str, AfterValidator(_check_email)]


class Gender(str, Enum):
    """Recorded gender."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


PATIENT_REQUIRED_MESSAGES = {
    "firstName": "First name is required",
    "lastName": "Last name is required",
    "initials": "Initials are required",
    "dob": "Date of birth is required",
    "gender": "Gender is required",
    "email": "Email is required",
    "phone": "Phone number is required",
    "address": "Address is required",
}

PATIENT_INVALID_MESSAGES = {
    "dob": "Invalid date of birth",
    "gender": "Gender must be one of: Male, Female, Other",
    "email": "Invalid email address",
}


class PatientCreate(CamelModel):
    """Schema for creating a patient."""

    first_name: RequiredText
    last_name: RequiredText
    initials: RequiredText
    dob: date
    gender: Gender
    email: EmailAddress
    phone: RequiredText
    address: RequiredText

    required_messages: ClassVar[dict[str, str]] = PATIENT_REQUIRED_MESSAGES
    invalid_messages: ClassVar[dict[str, str]] = PATIENT_INVALID_MESSAGES


class PatientUpdate(CamelModel):
    """Schema for updating a patient (all fields optional, id immutable)."""

    first_name: Optional[RequiredText] = None
    last_name: Optional[RequiredText] = None
    initials: Optional[RequiredText] = None
    dob: Optional[date] = None
    gender: Optional[Gender] = None
    email: Optional[EmailAddress] = None
    phone: Optional[RequiredText] = None
    address: Optional[RequiredText] = None

    required_messages: ClassVar[dict[str, str]] = PATIENT_REQUIRED_MESSAGES
    invalid_messages: ClassVar[dict[str, str]] = PATIENT_INVALID_MESSAGES


class Patient(PatientCreate):
    """Stored patient record.

    ``createdAt``/``updatedAt`` are managed by the repository and are unset
    until the first write.
    """

    id: str = Field(..., pattern=PATIENT_ID_PATTERN)
    consent_form: Optional[ConsentForm] = None
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None

    invalid_messages: ClassVar[dict[str, str]] = {
        **PATIENT_INVALID_MESSAGES,
        "id": "Patient ID must look like YYYY-NNN",
    }

    @property
    def display_name(self) -> str:
        """Name used in appointment titles: ``<lastName>, <initials>``."""
        return f"{self.last_name}, {self.initials}"
