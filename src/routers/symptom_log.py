"""Daily symptom log endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.dependencies import CurrentUser, Profiles, Today
from src.models.profile import LogEntry, LogEntryWrite
from src.services.profile_store import ProfileNotFoundError, ProfileStoreError
from src.tracking.symptom_log import SymptomLogStore, entry_for, recent

router = APIRouter(prefix="/symptom-log", tags=["symptom log"])


@router.get("", response_model=list[LogEntry])
async def list_entries(
    user: CurrentUser,
    store: Profiles,
    limit: int | None = Query(default=None, ge=1, le=365),
) -> Any:
    """The log in stored order; ``limit`` keeps only the most recent entries."""
    try:
        profile = await store.get(user.user_id)
    except ProfileStoreError as exc:
        raise HTTPException(status_code=503, detail="Could not fetch user data.") from exc
    if limit is None:
        return profile.symptoms_log
    return recent(profile.symptoms_log, limit)


@router.get("/today", response_model=LogEntry)
async def get_today_entry(user: CurrentUser, store: Profiles, today: Today) -> Any:
    try:
        profile = await store.get(user.user_id)
    except ProfileStoreError as exc:
        raise HTTPException(status_code=503, detail="Could not fetch user data.") from exc
    return entry_for(profile.symptoms_log, today)


@router.put("", response_model=list[LogEntry])
async def save_entry(
    user: CurrentUser, store: Profiles, body: LogEntryWrite, today: Today
) -> Any:
    """Save one day's entry, replacing anything already logged for that date."""
    try:
        profile = await store.get(user.user_id)
    except ProfileStoreError as exc:
        raise HTTPException(status_code=503, detail="Could not fetch user data.") from exc
    if not profile.onboarded:
        raise HTTPException(status_code=404, detail="Profile not found. Complete onboarding first.")

    entry = LogEntry(
        date=body.date or today,
        symptoms=body.symptoms,
        mood=body.mood,
        cravings=body.cravings,
    )
    try:
        result = await SymptomLogStore(store).upsert(user.user_id, profile, entry)
    except ProfileNotFoundError as exc:
        raise HTTPException(
            status_code=404, detail="Profile not found. Complete onboarding first."
        ) from exc
    if not result.ok:
        raise HTTPException(status_code=503, detail="Could not save your log. Please try again.")
    return result.entries
