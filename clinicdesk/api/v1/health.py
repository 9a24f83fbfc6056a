"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from clinicdesk.api.deps import Store
from clinicdesk.services.store import Collection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


class ReadinessResponse(HealthResponse):
    """Readiness response with the size of each collection."""

    collections: dict[str, int]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Returns service health status",
)
async def health_check() -> HealthResponse:
    """Check if the service is healthy.

    Returns:
        Health status response
    """
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Reads every collection from the store",
)
def readiness_check(store: Store) -> ReadinessResponse:
    """Check that the store can be read.

    Collections that are missing or unreadable count as empty.
    """
    counts = {}
    for collection in Collection:
        documents = store.read(collection, [])
        counts[collection.value] = len(documents) if isinstance(documents, list) else 0
    return ReadinessResponse(status="ok", collections=counts)
