"""Shared FastAPI dependencies injected into route handlers.

Long-lived clients (profile store, insight client) are built in the app
lifespan and kept on ``app.state``; routes receive them through these
dependencies so tests can override them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from src.config import Settings, get_settings
from src.services.gemini import InsightClient
from src.services.profile_store import ProfileStore
from src.tracking.cycle_projector import CycleProjector
from src.tracking.pregnancy_projector import PregnancyProjector


@dataclass(frozen=True)
class AuthContext:
    """Authenticated user context extracted from the bearer JWT."""

    user_id: str  # identity provider subject ("sub" claim)
    email: str | None = None
    session_id: str | None = None


async def get_current_user(request: Request) -> AuthContext:
    """Extract the authenticated user from the request state.

    The JWT auth middleware sets ``request.state.auth`` before routes run.
    """
    auth: AuthContext | None = getattr(request.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return auth


def get_profile_store(request: Request) -> ProfileStore:
    store: ProfileStore | None = getattr(request.app.state, "profile_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Profile store not configured")
    return store


def get_insight_client(request: Request) -> InsightClient:
    client: InsightClient | None = getattr(request.app.state, "insight_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Insights service not configured")
    return client


def get_today() -> date:
    """Reference day for projections and default log dates."""
    return date.today()


def get_cycle_projector() -> CycleProjector:
    return CycleProjector()


def get_pregnancy_projector() -> PregnancyProjector:
    return PregnancyProjector()


# Annotated shortcuts for route signatures
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Profiles = Annotated[ProfileStore, Depends(get_profile_store)]
Insights = Annotated[InsightClient, Depends(get_insight_client)]
Today = Annotated[date, Depends(get_today)]
CycleProjectorDep = Annotated[CycleProjector, Depends(get_cycle_projector)]
PregnancyProjectorDep = Annotated[PregnancyProjector, Depends(get_pregnancy_projector)]
