"""Test app wiring for route tests.

Routes are mounted on a bare FastAPI app without the JWT middleware; the
caller identity, stores and "today" are supplied via dependency overrides.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sse_starlette.sse import AppStatus

from src.dependencies import (
    AuthContext,
    get_current_user,
    get_insight_client,
    get_profile_store,
    get_today,
)
from src.models.profile import LogEntry, Mood, UserProfile
from src.routers import guidance, insights, profile, projections, symptom_log

TEST_USER_ID = "user_2abc123"
TODAY = date(2024, 1, 3)


@pytest.fixture(autouse=True)
def _reset_sse_exit_event() -> None:
    # sse-starlette caches its shutdown event on the first event loop it sees
    AppStatus.should_exit_event = None


def build_app() -> FastAPI:
    app = FastAPI()
    for module in (profile, projections, symptom_log, guidance, insights):
        app.include_router(module.router, prefix="/api/v1")
    return app


@pytest.fixture
def stored_profile() -> UserProfile:
    return UserProfile(
        age=29,
        gender="female",
        last_period_date="2024-01-01",
        cycle_length=28,
        period_length=5,
        onboarded=True,
        symptoms_log=[
            LogEntry(date=date(2024, 1, 1), symptoms=["Cramps"], mood=Mood.sad),
            LogEntry(date=date(2024, 1, 2), symptoms=["Headache"]),
            LogEntry(date=date(2024, 1, 3), symptoms=["Bloating"], mood=Mood.okay),
        ],
    )


@pytest.fixture
def profile_store(stored_profile: UserProfile) -> MagicMock:
    store = MagicMock()
    store.get = AsyncMock(return_value=stored_profile)
    store.replace = AsyncMock(return_value=None)
    store.replace_field = AsyncMock(return_value=None)
    return store


@pytest.fixture
def insight_client() -> MagicMock:
    client = MagicMock()
    client.ask = AsyncMock(return_value="This can be related to hormonal changes.")
    return client


@pytest.fixture
def app(profile_store: MagicMock, insight_client: MagicMock) -> FastAPI:
    app = build_app()
    app.dependency_overrides[get_current_user] = lambda: AuthContext(user_id=TEST_USER_ID)
    app.dependency_overrides[get_profile_store] = lambda: profile_store
    app.dependency_overrides[get_insight_client] = lambda: insight_client
    app.dependency_overrides[get_today] = lambda: TODAY
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
