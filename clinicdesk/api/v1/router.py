"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from clinicdesk.api.v1 import appointments, data, health, medical_records, patients

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Patients (incl. consent form)
api_router.include_router(patients.router)

# Medical records
api_router.include_router(medical_records.router)

# Appointments
api_router.include_router(appointments.router)

# Export / import
api_router.include_router(data.router)
