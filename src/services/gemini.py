"""Gemini ``generateContent`` client for advisory answers.

Sends a fixed system prompt and the user's text as one request and returns
the first candidate's text.  Rate-limit (429) and server (5xx) responses
are retried with exponential backoff; everything else fails fast with an
``InsightError``.

The client performs no medical validation of the generated text.  Callers
must show the matching disclaimer next to every answer.

Environment variables (via Settings):
    GEMINI_API_KEY   — API key sent as the ``key`` query parameter
    GEMINI_MODEL     — model name, e.g. gemini-2.5-flash-preview-09-2025
    GEMINI_API_BASE  — API root, defaults to the public v1beta endpoint
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from src.config import Settings, get_settings

logger = logging.getLogger("cyclecare.insights")

SYMPTOM_ANALYZER_PROMPT = (
    "You are a health assistant in a period tracking app. A user is describing "
    "their symptoms. Provide a brief, supportive, and informative general overview "
    "of what *could* be related to these symptoms (e.g., 'This can sometimes be "
    "related to hormonal changes...'). **CRITICAL:** Do NOT provide a diagnosis. "
    "Your primary goal is to validate their concern and strongly urge them to see a "
    "doctor. Keep the response to 2-3 short paragraphs."
)

PREGNANCY_QUERY_PROMPT = (
    "You are a helpful assistant for a pregnant user in a health app. The user is "
    "asking a non-urgent, general question about pregnancy. Provide a supportive, "
    "informative, and clear answer. **CRITICAL:** Always end your response with a "
    "clear disclaimer that this is general information, not medical advice, and they "
    "must consult their doctor or midwife for any personal health concerns."
)


def symptom_query(symptoms: str) -> str:
    return f'My symptoms are: "{symptoms}". What could this be related to?'


def pregnancy_query(question: str) -> str:
    return f'My question is: "{question}".'


class InsightError(Exception):
    """The advisory endpoint could not produce an answer.

    Attributes:
        status_code: HTTP status of the final response, or None for transport
                     errors and malformed bodies.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


def _extract_text(body: Any) -> str | None:
    """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


class InsightClient:
    """Ask the generative-text endpoint a question.

    Usage::

        client = InsightClient(settings=settings)
        answer = await client.ask(SYMPTOM_ANALYZER_PROMPT, symptom_query("cramps"))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        max_retries: int | None = None,
        initial_backoff_ms: int | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            settings:           App settings (API key, model, retry policy).
            http_client:        Optional pre-configured httpx client (for testing).
            max_retries:        Override for the number of retries after the first try.
            initial_backoff_ms: Override for the first retry delay; doubles per retry.
            sleep:              Awaitable sleep, injectable for tests.
        """
        s = settings or get_settings()
        self._api_key = s.gemini_api_key
        self._url = f"{s.gemini_api_base.rstrip('/')}/models/{s.gemini_model}:generateContent"
        self._timeout = s.insight_timeout_seconds
        self._max_retries = s.insight_max_retries if max_retries is None else max_retries
        self._initial_backoff_ms = (
            s.insight_initial_backoff_ms if initial_backoff_ms is None else initial_backoff_ms
        )
        self._http_client = http_client
        self._sleep = sleep

    async def ask(self, system_prompt: str, user_query: str) -> str:
        """Return the generated answer for ``user_query``.

        Raises:
            InsightError: On a non-retryable status, an exhausted retry budget,
                          a transport failure, or a body with no text.
        """
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"parts": [{"text": user_query}]}],
        }

        retries_left = self._max_retries
        delay_ms = self._initial_backoff_ms
        while True:
            response = await self._post(payload)
            if response.is_success:
                break
            status = response.status_code
            if _is_retryable(status) and retries_left > 0:
                logger.warning(
                    "Gemini call failed with status %d. Retrying in %dms...", status, delay_ms
                )
                await self._sleep(delay_ms / 1000)
                retries_left -= 1
                delay_ms *= 2
                continue
            logger.error("Gemini call failed with status %d", status)
            raise InsightError(
                f"API Error: {response.reason_phrase} (Status: {status})",
                status_code=status,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise InsightError("Invalid response structure from API.") from exc

        text = _extract_text(body)
        if text is None:
            logger.error("Gemini response had no candidate text")
            raise InsightError("Invalid response structure from API.")
        return text

    # ------------------------------------------------------------------
    # Private HTTP helper
    # ------------------------------------------------------------------

    async def _post(self, payload: dict) -> httpx.Response:
        params = {"key": self._api_key}
        headers = {"Content-Type": "application/json"}
        try:
            if self._http_client:
                return await self._http_client.post(
                    self._url, params=params, json=payload, headers=headers
                )
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.post(self._url, params=params, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Gemini transport error: %s", exc)
            raise InsightError(f"Could not reach the insights service: {exc}") from exc
