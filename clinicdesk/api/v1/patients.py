"""Patient endpoints.

Covers registration, edits, search, the embedded consent form and
deletion (optionally cascading to the patient's records and appointments).
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Response, status

from clinicdesk.api.deps import MedicalRecords, Patients, ensure_written, unwrap

router = APIRouter(prefix="/patients", tags=["patients"])


def _get_or_404(service: Patients, patient_id: str) -> dict[str, Any]:
    patient = service.get(patient_id)
    if patient is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient not found: {patient_id}",
        )
    return patient.to_document()


@router.get("")
def list_patients(
    service: Patients,
    q: Optional[str] = Query(None, description="Match on first name, last name or initials"),
    descending: bool = False,
) -> list[dict[str, Any]]:
    """List patients, or search them when ``q`` is given (ordered by last name)."""
    if q is None:
        patients = service.list()
    else:
        patients = service.search(q, descending=descending)
    return [p.to_document() for p in patients]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_patient(
    service: Patients,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Register a patient under the next identifier for the current year."""
    return unwrap(service.create(body))


@router.get("/{patient_id}")
def get_patient(patient_id: str, service: Patients) -> dict[str, Any]:
    return _get_or_404(service, patient_id)


@router.patch("/{patient_id}")
def update_patient(
    patient_id: str,
    service: Patients,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Update patient details; the identifier cannot change."""
    return unwrap(service.update(patient_id, body))


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(
    patient_id: str,
    service: Patients,
    cascade: Optional[bool] = None,
) -> Response:
    """Delete a patient.

    Without ``cascade`` the configured default decides whether the
    patient's medical records and appointments go too.
    """
    ensure_written(service.delete(patient_id, cascade=cascade))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------------------------------------------------------------
# Consent form
# ----------------------------------------------------------------------


@router.put("/{patient_id}/consent")
def sign_consent(
    patient_id: str,
    service: Patients,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Sign (or re-sign) the patient's consent form."""
    return unwrap(service.sign_consent(patient_id, body))


@router.delete("/{patient_id}/consent")
def clear_consent(patient_id: str, service: Patients) -> dict[str, Any]:
    return unwrap(service.clear_consent(patient_id))


# ----------------------------------------------------------------------
# History
# ----------------------------------------------------------------------


@router.get("/{patient_id}/medical-records")
def list_patient_records(
    patient_id: str,
    service: Patients,
    records: MedicalRecords,
) -> list[dict[str, Any]]:
    """The patient's medical records, most recent visit first."""
    _get_or_404(service, patient_id)
    return [r.to_document() for r in records.list_for_patient(patient_id)]


@router.get("/{patient_id}/last-visit")
def last_visit(
    patient_id: str,
    service: Patients,
    records: MedicalRecords,
) -> dict[str, Any]:
    _get_or_404(service, patient_id)
    visit = records.last_visit(patient_id)
    return {"patientId": patient_id, "lastVisit": visit.isoformat() if visit else None}
