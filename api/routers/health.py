"""
Health check router.

This router provides health check endpoints for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_settings, get_supabase_client
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health():
    """
    Simple liveness endpoint for bad-idea-api.

    Returns:
        dict: Status indicator for health checks
    """
    return {"status": "ok", "service": "bad-idea-api"}


@router.get("/health/ready")
def health_ready(settings: Settings = Depends(get_settings)):
    """
    Readiness probe that checks downstream dependencies.

    Verifies Supabase connectivity and reports whether the Anthropic key is
    configured. Returns 503 if the store is unreachable.
    """
    checks = {"anthropic": "ok" if settings.anthropic_api_key else "not_configured"}

    client = get_supabase_client()
    if client is None:
        checks["supabase"] = "not_configured"
        return {"status": "ready", "service": "bad-idea-api", "checks": checks}

    try:
        # Lightweight query to verify connectivity
        client.table("daily_ideas").select("date").limit(1).execute()
        checks["supabase"] = "ok"
    except Exception as e:
        logger.warning("Readiness check failed for supabase: %s", e)
        checks["supabase"] = "unavailable"
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": "bad-idea-api",
                "checks": checks,
            },
        )

    return {"status": "ready", "service": "bad-idea-api", "checks": checks}
