"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clinicdesk.api.v1.router import api_router
from clinicdesk.core.config import settings
from clinicdesk.core.logging import setup_logging
from clinicdesk.services.appointments import AppointmentNotFoundError
from clinicdesk.services.identifiers import PatientIdCapacityError
from clinicdesk.services.medical_records import RecordNotFoundError
from clinicdesk.services.patients import PatientNotFoundError
from clinicdesk.services.snapshot import SnapshotFormatError

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"Starting ClinicDesk API (env={settings.env})")

    yield

    logger.info("Shutting down ClinicDesk API")


app = FastAPI(
    title="ClinicDesk API",
    description="Patients, medical records and appointments for a single clinic",
    version="0.1.0",
    docs_url="/docs" if settings.is_dev else None,
    redoc_url="/redoc" if settings.is_dev else None,
    openapi_url="/openapi.json" if settings.is_dev else None,
    lifespan=lifespan,
)

# CORS middleware for the local front end
if settings.is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ----------------------------------------------------------------------
# Exception handlers
# ----------------------------------------------------------------------


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unknown patient, record or appointment."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


for _exc in (PatientNotFoundError, RecordNotFoundError, AppointmentNotFoundError):
    app.add_exception_handler(_exc, not_found_handler)


@app.exception_handler(PatientIdCapacityError)
async def capacity_handler(request: Request, exc: PatientIdCapacityError) -> JSONResponse:
    """No patient identifiers left for the current year."""
    logger.error(f"Patient registration blocked: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)},
    )


@app.exception_handler(SnapshotFormatError)
async def snapshot_format_handler(request: Request, exc: SnapshotFormatError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    # Don't expose internal errors in production
    if settings.is_prod:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


# Include API router
app.include_router(api_router, prefix="/api/v1")


# Root endpoint
@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Service information."""
    return {
        "service": "ClinicDesk API",
        "version": "0.1.0",
        "docs": "/docs" if settings.is_dev else "Disabled in production",
    }
