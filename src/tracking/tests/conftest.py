"""Shared fixtures for cycle/pregnancy projection and symptom log tests."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.profile import LogEntry, Mood, UserProfile
from src.tracking.config_loader import TrackingConfig, load_tracking_config
from src.tracking.cycle_projector import CycleProjector
from src.tracking.pregnancy_projector import PregnancyProjector

TEST_USER_ID = "user_2abc123"
LAST_PERIOD = date(2024, 1, 1)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tracking_config() -> TrackingConfig:
    """Load the real tracking config for tests."""
    return load_tracking_config()


@pytest.fixture
def cycle_projector(tracking_config: TrackingConfig) -> CycleProjector:
    return CycleProjector(config=tracking_config)


@pytest.fixture
def pregnancy_projector(tracking_config: TrackingConfig) -> PregnancyProjector:
    return PregnancyProjector(config=tracking_config)


# ---------------------------------------------------------------------------
# Profile fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def onboarded_profile() -> UserProfile:
    """28-day cycle, 5-day period, last period on 2024-01-01."""
    return UserProfile(
        age=29,
        gender="female",
        last_period_date="2024-01-01",
        cycle_length=28,
        period_length=5,
        onboarded=True,
    )


@pytest.fixture
def profile_with_logs(onboarded_profile: UserProfile) -> UserProfile:
    return onboarded_profile.model_copy(
        update={
            "symptoms_log": [
                LogEntry(date=date(2024, 1, 2), symptoms=["Cramps"], mood=Mood.sad),
                LogEntry(date=date(2024, 1, 3), symptoms=["Cramps", "Headache"]),
                LogEntry(date=date(2024, 1, 4), symptoms=[], mood=Mood.okay),
                LogEntry(date=date(2024, 1, 5), symptoms=["Bloating"], cravings="Sweet"),
            ]
        }
    )


# ---------------------------------------------------------------------------
# Store mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_profile_store() -> MagicMock:
    """ProfileStore stand-in whose writes succeed."""
    store = MagicMock()
    store.get = AsyncMock()
    store.replace = AsyncMock(return_value=None)
    store.replace_field = AsyncMock(return_value=None)
    return store
