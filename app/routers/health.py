# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness and readiness checks. Readiness pings the users table.
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    database: str
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
def health_check():
    """
    Process is up; reports environment and API version.
    """
    return HealthResponse(
        status="healthy",
        timestamp=utc_now().isoformat(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check():
    """
    Readiness check: "degraded" when Supabase is unreachable.
    """
    try:
        SupabaseClient.ping()
        database = "healthy"
    except SupabaseClientError as e:
        database = f"unhealthy: {str(e)[:50]}"

    return ReadinessResponse(
        status="ready" if database == "healthy" else "degraded",
        database=database,
        timestamp=utc_now().isoformat(),
    )


@router.get("/health/live", response_model=LivenessResponse)
def liveness_check():
    """
    Liveness check; never touches the database.
    """
    return LivenessResponse(
        status="alive",
        timestamp=utc_now().isoformat(),
    )
