"""Healthcheck endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from childtrack.api.dependencies import TzDep

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timezone: str


@router.get("/health", response_model=HealthResponse)
async def health_check(tz: TzDep) -> HealthResponse:
    """Service status and the reference time zone used for day buckets."""
    return HealthResponse(status="ok", timezone=str(tz))
