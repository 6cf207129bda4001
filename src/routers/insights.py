"""Advisory answers from the generative-text service.

Every answer is returned with a fixed disclaimer; it is never a diagnosis.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from src.dependencies import CurrentUser, Insights
from src.models.profile import InsightQuery, InsightRead
from src.services.gemini import (
    PREGNANCY_QUERY_PROMPT,
    SYMPTOM_ANALYZER_PROMPT,
    InsightClient,
    InsightError,
    pregnancy_query,
    symptom_query,
)
from src.tracking.guidance import PREGNANCY_DISCLAIMER, SYMPTOM_DISCLAIMER

router = APIRouter(prefix="/insights", tags=["insights"])
logger = logging.getLogger("cyclecare.routers.insights")


async def _ask(client: InsightClient, system_prompt: str, query: str) -> str:
    try:
        return await client.ask(system_prompt, query)
    except InsightError as exc:
        logger.error("Insight request failed: %s", exc)
        raise HTTPException(
            status_code=502,
            detail=f"Could not get insights. {exc}",
        ) from exc


@router.post("/symptoms", response_model=InsightRead)
async def analyze_symptoms(user: CurrentUser, client: Insights, body: InsightQuery) -> Any:
    answer = await _ask(client, SYMPTOM_ANALYZER_PROMPT, symptom_query(body.text))
    return InsightRead(answer=answer, disclaimer=SYMPTOM_DISCLAIMER)


@router.post("/pregnancy", response_model=InsightRead)
async def ask_pregnancy_question(user: CurrentUser, client: Insights, body: InsightQuery) -> Any:
    answer = await _ask(client, PREGNANCY_QUERY_PROMPT, pregnancy_query(body.text))
    return InsightRead(answer=answer, disclaimer=PREGNANCY_DISCLAIMER)
