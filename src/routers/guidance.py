"""Static guidance: symptom remedies, craving swaps, pregnancy nutrition."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from src.dependencies import CurrentUser
from src.models.base import ErrorDetail
from src.models.profile import Craving, CravingSwapsRead, NutritionTipRead, SymptomInfoRead
from src.tracking.guidance import (
    CRAVING_SWAPS,
    NUTRITION_TIPS,
    SYMPTOM_TAGS,
    canonical_symptom,
    symptom_info,
)

router = APIRouter(prefix="/guidance", tags=["guidance"])


@router.get("/symptoms", response_model=list[str])
async def list_symptom_tags(user: CurrentUser) -> Any:
    """Symptom tags offered when logging a day."""
    return list(SYMPTOM_TAGS)


@router.get(
    "/symptoms/{tag}",
    response_model=SymptomInfoRead,
    responses={404: {"model": ErrorDetail}},
)
async def get_symptom_info(tag: str, user: CurrentUser) -> Any:
    info = symptom_info(tag)
    name = canonical_symptom(tag)
    if info is None or name is None:
        raise HTTPException(status_code=404, detail=f"No information for symptom '{tag}'")
    return SymptomInfoRead(symptom=name, reason=info.reason, remedies=list(info.remedies))


@router.get("/cravings/{craving}", response_model=CravingSwapsRead)
async def get_craving_swaps(craving: Craving, user: CurrentUser) -> Any:
    return CravingSwapsRead(craving=craving, suggestions=list(CRAVING_SWAPS[craving]))


@router.get("/pregnancy/nutrition", response_model=list[NutritionTipRead])
async def get_nutrition_tips(user: CurrentUser) -> Any:
    return [NutritionTipRead(title=t.title, content=t.content) for t in NUTRITION_TIPS]
