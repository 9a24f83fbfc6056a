"""Medical record endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Response, status

from clinicdesk.api.deps import MedicalRecords, ensure_written, unwrap

router = APIRouter(prefix="/medical-records", tags=["medical-records"])


@router.get("")
def list_records(
    service: MedicalRecords,
    patient_id: Optional[str] = Query(None, alias="patientId"),
) -> list[dict[str, Any]]:
    """List records in stored order, optionally for one patient."""
    return [r.to_document() for r in service.list(patient_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_record(
    service: MedicalRecords,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return unwrap(service.create(body))


@router.get("/{record_id}")
def get_record(record_id: str, service: MedicalRecords) -> dict[str, Any]:
    record = service.get(record_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Medical record not found: {record_id}",
        )
    return record.to_document()


@router.patch("/{record_id}")
def update_record(
    record_id: str,
    service: MedicalRecords,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return unwrap(service.update(record_id, body))


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(record_id: str, service: MedicalRecords) -> Response:
    ensure_written(service.delete(record_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
