"""Derived cycle/pregnancy projections and the shareable summary."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from src.dependencies import (
    CurrentUser,
    CycleProjectorDep,
    PregnancyProjectorDep,
    Profiles,
    Today,
)
from src.models.profile import CycleProjectionRead, PregnancyProjectionRead, UserProfile
from src.services.profile_store import ProfileStore, ProfileStoreError
from src.tracking.share_summary import build_share_summary

router = APIRouter(prefix="/projections", tags=["projections"])


async def _load_profile(store: ProfileStore, user_id: str) -> UserProfile:
    try:
        return await store.get(user_id)
    except ProfileStoreError as exc:
        raise HTTPException(status_code=503, detail="Could not fetch user data.") from exc


@router.get("/cycle", response_model=CycleProjectionRead)
async def get_cycle_projection(
    user: CurrentUser, store: Profiles, projector: CycleProjectorDep, today: Today
) -> Any:
    profile = await _load_profile(store, user.user_id)
    projection = projector.project(profile, as_of_date=today)
    if projection is None:
        raise HTTPException(
            status_code=422,
            detail="Could not calculate cycle data. Please check your profile settings.",
        )
    return CycleProjectionRead(
        next_period_start=projection.next_period_start,
        period_end=projection.period_end,
        ovulation_date=projection.ovulation_date,
        fertile_start=projection.fertile_start,
        fertile_end=projection.fertile_end,
        current_cycle_day=projection.current_cycle_day,
        is_in_period=projection.is_in_period,
        is_fertile=projection.is_fertile,
        fertility_level=projection.fertility_level,
        status=projection.status,
        cycle_length=projection.cycle_length,
        period_length=projection.period_length,
    )


@router.get("/pregnancy", response_model=PregnancyProjectionRead)
async def get_pregnancy_projection(
    user: CurrentUser, store: Profiles, projector: PregnancyProjectorDep, today: Today
) -> Any:
    profile = await _load_profile(store, user.user_id)
    projection = projector.project(profile.pregnancy_due_date, as_of_date=today)
    if projection is None:
        raise HTTPException(
            status_code=422,
            detail="Could not calculate pregnancy data. Please check your due date.",
        )
    return PregnancyProjectionRead(
        gestational_week=projection.gestational_week,
        extra_days=projection.extra_days,
        weekly_insight_title=projection.milestone.title,
        weekly_insight=projection.milestone.content,
    )


@router.get("/summary", response_class=PlainTextResponse)
async def get_share_summary(
    user: CurrentUser, store: Profiles, projector: CycleProjectorDep, today: Today
) -> str:
    """Plain-text summary for copying into a message."""
    profile = await _load_profile(store, user.user_id)
    projection = projector.project(profile, as_of_date=today)
    return build_share_summary(profile, projection)
