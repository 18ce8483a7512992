"""Health check endpoints."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from backend.api.deps import Settings, StoreDep

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "lyric-studio"


class HealthCheckResponse(BaseModel):
    """Basic health check response."""

    status: str
    service: str


class DeepHealthCheckResponse(BaseModel):
    """Deep health check response with component status."""

    status: str
    service: str
    timestamp: str
    checks: dict[str, dict[str, Any]]


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint for load balancers and monitoring."""
    return HealthCheckResponse(status="healthy", service=SERVICE_NAME)


@router.get("/health/deep", response_model=DeepHealthCheckResponse)
async def deep_health_check(store: StoreDep, settings: Settings) -> DeepHealthCheckResponse:
    """Deep health check covering the store and LLM configuration.

    Checks:
    - Store: can reach the configured database
    - LLM: an API key is configured (no model call is made)

    Does not require authentication since it only tests connectivity, not user data.
    """
    checks: dict[str, dict[str, Any]] = {}
    overall_healthy = True

    try:
        message = await store.check()
        checks["store"] = {
            "status": "healthy",
            "backend": settings.database_backend,
            "message": message,
        }
    except Exception as e:
        logger.error(f"Store health check failed: {e}")
        checks["store"] = {
            "status": "unhealthy",
            "backend": settings.database_backend,
            "error": str(e),
        }
        overall_healthy = False

    if settings.llm_configured:
        checks["llm"] = {"status": "healthy", "model": settings.llm_model}
    else:
        checks["llm"] = {"status": "unhealthy", "error": "LLM_API_KEY is not configured"}
        overall_healthy = False

    return DeepHealthCheckResponse(
        status="healthy" if overall_healthy else "degraded",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
        checks=checks,
    )
