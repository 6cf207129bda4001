"""CycleCare API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import get_settings
from src.middleware.jwt_auth import JWTAuthMiddleware
from src.routers import guidance, health, insights, profile, projections, symptom_log
from src.services.database import close_pool, connect_listener, create_pool
from src.services.gemini import InsightClient
from src.services.profile_store import ProfileStore

# ---------- Logging ----------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cyclecare")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the long-lived clients and hang them on ``app.state``."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(
        "Starting CycleCare API v%s [%s]",
        settings.app_version,
        settings.environment,
    )

    pool = await create_pool(settings)
    store = ProfileStore(
        pool,
        settings.document_namespace,
        connect_listener=partial(connect_listener, settings),
    )
    await store.ensure_schema()
    http_client = httpx.AsyncClient(timeout=settings.insight_timeout_seconds)

    app.state.db_pool = pool
    app.state.profile_store = store
    app.state.insight_client = InsightClient(settings, http_client=http_client)
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; insight requests will be rejected upstream")

    try:
        yield
    finally:
        await http_client.aclose()
        await store.close()
        await close_pool(pool)
        logger.info("CycleCare API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description=(
            "Menstrual cycle and pregnancy tracking — cycle projections, "
            "daily symptom logging, guidance, and AI-assisted insights."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (order matters — outermost first) ----------

    # Bearer JWT authentication
    app.add_middleware(JWTAuthMiddleware, settings=settings)

    # CORS — must be the innermost middleware so it can handle preflight
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix — always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(profile.router, prefix=v1_prefix)
    app.include_router(projections.router, prefix=v1_prefix)
    app.include_router(symptom_log.router, prefix=v1_prefix)
    app.include_router(guidance.router, prefix=v1_prefix)
    app.include_router(insights.router, prefix=v1_prefix)

    return app


app = create_app()
