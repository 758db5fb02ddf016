"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import redis.asyncio as redis

from config import settings, is_placeholder_key
from routers.analysis import get_provider_router
from services.providers import ProviderRouter

router = APIRouter()


@router.get("/health")
async def health_check(provider_router: ProviderRouter = Depends(get_provider_router)):
    """
    Health check endpoint.
    Returns overall system health status.
    """
    configured = provider_router.configured_providers()
    health_status = {
        "status": "healthy",
        "api": "up",
        "redis": "unknown",
        "ai_providers": configured,
        "youtube_api_key": "missing" if is_placeholder_key(settings.YOUTUBE_API_KEY) else "configured",
        "tiktok_api_key": "missing" if is_placeholder_key(settings.TIKTOK_RAPIDAPI_KEY) else "configured",
    }

    if not configured:
        health_status["status"] = "degraded"

    # Redis only backs rate limiting; local counters cover an outage.
    try:
        r = redis.from_url(settings.REDIS_URL)
        await r.ping()
        await r.aclose()
        health_status["redis"] = "up"
    except (redis.RedisError, OSError) as e:
        health_status["redis"] = f"down: {str(e)}"

    return health_status


@router.get("/health/ready")
async def readiness_check(provider_router: ProviderRouter = Depends(get_provider_router)):
    """Kubernetes-style readiness probe."""
    if not provider_router.configured_providers():
        return JSONResponse(
            status_code=503,
            content={
                "ready": False,
                "missing": ["OPENAI_API_KEY | ANTHROPIC_API_KEY | GOOGLE_API_KEY | GROK_API_KEY"],
            },
        )
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes-style liveness probe."""
    return {"alive": True}
