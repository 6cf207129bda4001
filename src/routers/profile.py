"""Profile document endpoints: read, onboarding, and a live change stream."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from src.dependencies import CurrentUser, Profiles
from src.models.profile import OnboardingRequest, UserProfile
from src.services.profile_store import ProfileStoreError

router = APIRouter(prefix="/profile", tags=["profile"])
logger = logging.getLogger("cyclecare.routers.profile")


@router.get("", response_model=UserProfile)
async def get_profile(user: CurrentUser, store: Profiles) -> Any:
    """The caller's profile.  ``onboarded`` is false until onboarding completes."""
    try:
        return await store.get(user.user_id)
    except ProfileStoreError as exc:
        raise HTTPException(status_code=503, detail="Could not fetch user data.") from exc


@router.put("", response_model=UserProfile)
async def complete_onboarding(
    user: CurrentUser, store: Profiles, body: OnboardingRequest
) -> Any:
    """Create (or overwrite) the profile from the onboarding answers.

    Starts the user with an empty symptom log.
    """
    profile = body.to_profile()
    try:
        await store.replace(user.user_id, profile)
    except ProfileStoreError as exc:
        raise HTTPException(
            status_code=503,
            detail="Could not save your information. Please try again.",
        ) from exc
    return profile


@router.get("/events")
async def profile_events(user: CurrentUser, store: Profiles) -> EventSourceResponse:
    """Server-sent events: the current profile, then one event per change.

    The stream stays open until the client disconnects.
    """

    async def _stream() -> AsyncIterator[dict]:
        watcher = store.watch(user.user_id)
        try:
            async for profile in watcher:
                yield {"event": "profile", "data": json.dumps(profile.to_document())}
        except ProfileStoreError as exc:
            logger.error("Profile stream for user %s ended: %s", user.user_id, exc)
            yield {"event": "error", "data": json.dumps({"detail": "Could not fetch user data."})}
        finally:
            await watcher.aclose()

    return EventSourceResponse(_stream())
