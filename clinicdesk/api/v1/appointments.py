"""Appointment endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Response, status

from clinicdesk.api.deps import Appointments, ensure_written, unwrap

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("")
def list_appointments(
    service: Appointments,
    patient_id: Optional[str] = Query(None, alias="patientId"),
) -> list[dict[str, Any]]:
    return [a.to_document() for a in service.list(patient_id)]


@router.get("/upcoming")
def upcoming_appointments(service: Appointments) -> list[dict[str, Any]]:
    """Appointments that have not started yet, soonest first."""
    return [a.to_document() for a in service.upcoming()]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_appointment(
    service: Appointments,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Book an appointment; title and status are derived."""
    return unwrap(service.create(body))


@router.get("/{appointment_id}")
def get_appointment(appointment_id: str, service: Appointments) -> dict[str, Any]:
    appointment = service.get(appointment_id)
    if appointment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Appointment not found: {appointment_id}",
        )
    return appointment.to_document()


@router.patch("/{appointment_id}")
def update_appointment(
    appointment_id: str,
    service: Appointments,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Reschedule or edit an appointment; status is derived again."""
    return unwrap(service.update(appointment_id, body))


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(appointment_id: str, service: Appointments) -> Response:
    ensure_written(service.delete(appointment_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
