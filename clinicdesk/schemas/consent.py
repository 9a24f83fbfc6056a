"""Pydantic schemas for consent forms embedded in patients."""

import datetime as dt
from typing import ClassVar

from clinicdesk.schemas.base import CamelModel, RequiredText, Timestamp


class ConsentFormSign(CamelModel):
    """Command for signing a consent form."""

    location: RequiredText
    date: dt.date
    patient_name: RequiredText
    # Encoded signature image (data URL)
    signature: RequiredText

    required_messages: ClassVar[dict[str, str]] = {
        "location": "Location is required",
        "date": "Date is required",
        "patientName": "Patient name is required",
        "signature": "Please provide a signature",
    }
    invalid_messages: ClassVar[dict[str, str]] = {
        "date": "Invalid date",
    }


class ConsentForm(ConsentFormSign):
    """Signed consent form.

    Created only by signing; never updated in place. The agreement text is
    frozen at signing time and ``patientName`` may differ from the patient's
    registered name.
    """

    id: RequiredText
    signed_at: Timestamp
    agreement_text: str
