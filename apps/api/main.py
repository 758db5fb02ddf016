"""
Viral Content Analyzer - FastAPI Backend
Main application entry point with health check and API routing.
"""

import logging
import random
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from analysis.enhancer import ResultEnhancer
from config import settings
from ingestion.demo import DemoPostGenerator
from ingestion.sources import build_live_source
from routers import health, analysis, viral, saved
from routers.rate_limit import RateLimitExceeded
from services.providers import AllProvidersFailedError, NoProviderConfiguredError, build_provider_router
from services.saved_items import InMemorySavedItemStore

logger = logging.getLogger(__name__)

ANALYSIS_UNAVAILABLE_MESSAGE = "AI analysis is temporarily unavailable. Please try again later."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting Viral Content Analyzer API...")
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.AI_PROVIDER_TIMEOUT_SECONDS))
    app.state.http_client = http_client
    app.state.provider_router = build_provider_router(settings, client=http_client)
    app.state.live_source = build_live_source(settings, client=http_client)
    app.state.result_enhancer = ResultEnhancer(random.Random(settings.DEMO_RANDOM_SEED))
    app.state.demo_generator = DemoPostGenerator(random.Random(settings.DEMO_RANDOM_SEED))
    app.state.saved_item_store = InMemorySavedItemStore(
        ttl=timedelta(days=settings.SAVED_ITEM_TTL_DAYS),
        max_per_type=settings.SAVED_ITEMS_MAX_PER_TYPE,
    )

    configured = app.state.provider_router.configured_providers()
    if configured:
        print(f"🤖 AI providers configured: {', '.join(configured)}")
    else:
        print("⚠️ No AI provider key configured; /analyze will return 503.")
    yield
    # Shutdown
    await http_client.aclose()
    app.state.http_client = None
    print("👋 Shutting down API...")


app = FastAPI(
    title="Viral Content Analyzer API",
    description="Find viral posts and turn them into shoot ideas and PR campaigns",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "validation_error", "message": "Invalid request", "fields": fields},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"error": "rate_limit_exceeded", "message": str(exc)},
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.exception_handler(NoProviderConfiguredError)
@app.exception_handler(AllProvidersFailedError)
async def analysis_unavailable_handler(request: Request, exc: Exception):
    logger.error("Analysis unavailable: %s", exc)
    return JSONResponse(
        status_code=503,
        content={"error": "analysis_unavailable", "message": ANALYSIS_UNAVAILABLE_MESSAGE},
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(viral.router, tags=["Viral"])
app.include_router(analysis.router, tags=["Analysis"])
app.include_router(saved.router, tags=["Saved"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Viral Content Analyzer API",
        "version": "0.1.0",
        "status": "running"
    }
