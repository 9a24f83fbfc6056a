"""Whole-store export and import endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool

from clinicdesk.api.deps import Snapshots

router = APIRouter(prefix="/data", tags=["data"])


@router.get("/export")
def export_data(service: Snapshots) -> dict[str, Any]:
    """Snapshot of all collections as stored."""
    return service.export_snapshot()


@router.post("/import")
async def import_data(request: Request, service: Snapshots) -> dict[str, Any]:
    """Replace the well-formed collections present in the request body.

    The body is read raw so that unparseable JSON is reported as an import
    format error rather than a request validation error. Collections that
    were not applied are listed under ``rejected``.
    """
    payload = await request.body()
    result = await run_in_threadpool(service.import_snapshot, payload)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=result.error,
        )
    report = result.value
    return {
        "imported": report.imported,
        "rejected": [e.as_dict() for e in report.rejected],
    }
