"""Pydantic schemas for medical records and the items they own."""

import datetime as dt
from enum import Enum
from typing import ClassVar, Optional

from pydantic import Field

from clinicdesk.schemas.base import CamelModel, OptionalDate, RequiredText, Timestamp, new_id


class Medication(CamelModel):
    """Product administered during a visit. Owned by its record."""

    id: str = Field(default_factory=new_id)
    product_name: RequiredText
    generic_name: RequiredText
    dosage: RequiredText
    batch: RequiredText
    expiry_date: RequiredText


class Coordinates(CamelModel):
    """Position on the reference canvas, in percent."""

    x: float = Field(..., ge=0, le=100)
    y: float = Field(..., ge=0, le=100)


class TreatmentPoint(CamelModel):
    """Injection point marked on the face chart."""

    id: str = Field(default_factory=new_id)
    area: RequiredText
    units: int = Field(..., ge=1, le=12)
    coordinates: Coordinates


class RecordImageType(str, Enum):
    """Whether a photo was taken before or after treatment."""

    BEFORE = "Before"
    AFTER = "After"


class RecordImage(CamelModel):
    """Photo attached to a record.

    ``uploadedAt`` is stamped by the record service when absent.
    """

    id: str = Field(default_factory=new_id)
    type: RecordImageType
    url: RequiredText
    uploaded_at: Optional[Timestamp] = None


RECORD_REQUIRED_MESSAGES = {
    "patientId": "Patient is required",
    "date": "Date is required",
    "type": "Record type is required",
    "provider": "Provider is required",
    "complaint": "Chief complaint is required",
    "diagnosis": "Diagnosis is required",
    "treatment": "Treatment is required",
    "medications.productName": "Product name is required",
    "medications.genericName": "Generic name is required",
    "medications.dosage": "Dosage is required",
    "medications.batch": "Batch number is required",
    "medications.expiryDate": "Expiry date is required",
    "images.type": "Image type is required",
    "images.url": "Image URL is required",
    "treatmentPoints.area": "Area is required",
    "treatmentPoints.units": "Units are required",
    "treatmentPoints.coordinates": "Coordinates are required",
    "treatmentPoints.coordinates.x": "Coordinates are required",
    "treatmentPoints.coordinates.y": "Coordinates are required",
}

RECORD_INVALID_MESSAGES = {
    "date": "Invalid date",
    "followUpDate": "Invalid follow-up date",
    "images.type": "Image type must be Before or After",
    "treatmentPoints.units": "Units must be between 1 and 12",
    "treatmentPoints.coordinates.x": "Coordinates must be between 0 and 100",
    "treatmentPoints.coordinates.y": "Coordinates must be between 0 and 100",
}


class MedicalRecordCreate(CamelModel):
    """Schema for creating a medical record."""

    patient_id: RequiredText
    date: dt.date
    type: RequiredText
    provider: RequiredText
    complaint: RequiredText
    diagnosis: RequiredText
    treatment: RequiredText
    notes: str = ""
    follow_up_date: OptionalDate = None
    medications: list[Medication] = Field(default_factory=list)
    aftercare: list[str] = Field(default_factory=list)
    images: list[RecordImage] = Field(default_factory=list)
    treatment_points: list[TreatmentPoint] = Field(default_factory=list)

    required_messages: ClassVar[dict[str, str]] = RECORD_REQUIRED_MESSAGES
    invalid_messages: ClassVar[dict[str, str]] = RECORD_INVALID_MESSAGES


class MedicalRecordUpdate(CamelModel):
    """Schema for updating a medical record (patient link is immutable)."""

    date: Optional[dt.date] = None
    type: Optional[RequiredText] = None
    provider: Optional[RequiredText] = None
    complaint: Optional[RequiredText] = None
    diagnosis: Optional[RequiredText] = None
    treatment: Optional[RequiredText] = None
    notes: Optional[str] = None
    follow_up_date: OptionalDate = None
    medications: Optional[list[Medication]] = None
    aftercare: Optional[list[str]] = None
    images: Optional[list[RecordImage]] = None
    treatment_points: Optional[list[TreatmentPoint]] = None

    required_messages: ClassVar[dict[str, str]] = RECORD_REQUIRED_MESSAGES
    invalid_messages: ClassVar[dict[str, str]] = RECORD_INVALID_MESSAGES


class MedicalRecord(MedicalRecordCreate):
    """Stored medical record.

    ``patientId`` is a logical reference; the patient may no longer exist.
    """

    id: RequiredText
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None
