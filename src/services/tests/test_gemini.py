"""Tests for the Gemini insight client — retry policy and response parsing."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.config import Settings
from src.services.gemini import (
    SYMPTOM_ANALYZER_PROMPT,
    InsightClient,
    InsightError,
    _extract_text,
    pregnancy_query,
    symptom_query,
)
from src.services.tests.conftest import gemini_body, mock_response


def _client(settings: Settings, *responses: object) -> tuple[InsightClient, MagicMock, AsyncMock]:
    http = MagicMock()
    http.post = AsyncMock(side_effect=list(responses))
    sleep = AsyncMock()
    return InsightClient(settings, http_client=http, sleep=sleep), http, sleep


class TestQueries:
    def test_symptom_query_wording(self) -> None:
        assert symptom_query("cramps and fatigue") == (
            'My symptoms are: "cramps and fatigue". What could this be related to?'
        )

    def test_pregnancy_query_wording(self) -> None:
        assert pregnancy_query("Is coffee ok?") == 'My question is: "Is coffee ok?".'


class TestAsk:
    @pytest.mark.asyncio
    async def test_success_returns_first_candidate_text(self, settings: Settings) -> None:
        client, http, sleep = _client(settings, mock_response(200, gemini_body("Talk to a doctor.")))

        answer = await client.ask(SYMPTOM_ANALYZER_PROMPT, symptom_query("cramps"))

        assert answer == "Talk to a doctor."
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_request_shape(self, settings: Settings) -> None:
        client, http, _ = _client(settings, mock_response(200, gemini_body("ok")))

        await client.ask("system text", "user text")

        url = http.post.await_args.args[0]
        kwargs = http.post.await_args.kwargs
        assert url == "https://gemini.example.com/v1beta/models/gemini-test:generateContent"
        assert kwargs["params"] == {"key": "test-key"}
        assert kwargs["json"] == {
            "systemInstruction": {"parts": [{"text": "system text"}]},
            "contents": [{"parts": [{"text": "user text"}]}],
        }

    @pytest.mark.asyncio
    async def test_rate_limit_then_success_sleeps_once(self, settings: Settings) -> None:
        client, http, sleep = _client(
            settings,
            mock_response(429, reason="Too Many Requests"),
            mock_response(200, gemini_body("Rest and hydrate.")),
        )

        assert await client.ask("sys", "q") == "Rest and hydrate."
        assert http.post.await_count == 2
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_backoff_doubles_until_exhausted(self, settings: Settings) -> None:
        client, http, sleep = _client(
            settings, *[mock_response(503, reason="Service Unavailable") for _ in range(4)]
        )

        with pytest.raises(InsightError) as exc_info:
            await client.ask("sys", "q")

        assert exc_info.value.status_code == 503
        assert str(exc_info.value) == "API Error: Service Unavailable (Status: 503)"
        assert http.post.await_count == 4
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, settings: Settings) -> None:
        client, http, sleep = _client(settings, mock_response(400, reason="Bad Request"))

        with pytest.raises(InsightError, match=r"API Error: Bad Request \(Status: 400\)"):
            await client.ask("sys", "q")

        assert http.post.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_retry_budget(self, settings: Settings) -> None:
        http = MagicMock()
        http.post = AsyncMock(return_value=mock_response(500, reason="Internal Server Error"))
        sleep = AsyncMock()
        client = InsightClient(
            settings, http_client=http, max_retries=1, initial_backoff_ms=250, sleep=sleep
        )

        with pytest.raises(InsightError):
            await client.ask("sys", "q")

        assert http.post.await_count == 2
        sleep.assert_awaited_once_with(0.25)

    @pytest.mark.asyncio
    async def test_missing_candidate_text(self, settings: Settings) -> None:
        client, _, _ = _client(settings, mock_response(200, {"candidates": []}))

        with pytest.raises(InsightError, match="Invalid response structure from API."):
            await client.ask("sys", "q")

    @pytest.mark.asyncio
    async def test_non_json_body(self, settings: Settings) -> None:
        response = mock_response(200)
        response.json = MagicMock(side_effect=ValueError("Expecting value"))
        client, _, _ = _client(settings, response)

        with pytest.raises(InsightError, match="Invalid response structure from API."):
            await client.ask("sys", "q")

    @pytest.mark.asyncio
    async def test_transport_error(self, settings: Settings) -> None:
        client, _, _ = _client(settings, httpx.ConnectError("connection refused"))

        with pytest.raises(InsightError, match="Could not reach the insights service") as exc_info:
            await client.ask("sys", "q")

        assert exc_info.value.status_code is None


class TestExtractText:
    @pytest.mark.parametrize(
        "body",
        [
            None,
            {},
            {"candidates": [{}]},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        ],
    )
    def test_malformed_bodies(self, body: object) -> None:
        assert _extract_text(body) is None
