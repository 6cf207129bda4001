"""Tests for the symptom log merge rules and the upsert write path."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.profile import Craving, LogEntry, Mood, UserProfile
from src.services.profile_store import ProfileNotFoundError, ProfileStoreError
from src.tracking.symptom_log import (
    LOG_FIELD,
    SaveStatus,
    SymptomLogStore,
    entry_for,
    merge,
    recent,
)
from src.tracking.tests.conftest import TEST_USER_ID


class TestLogEntry:
    def test_duplicate_tags_collapsed_in_order(self) -> None:
        entry = LogEntry(date=date(2024, 1, 2), symptoms=["Cramps", " Acne ", "Cramps", ""])
        assert entry.symptoms == ["Cramps", "Acne"]

    def test_blank_mood_and_craving_are_unset(self) -> None:
        entry = LogEntry.model_validate({"date": "2024-01-02", "mood": "", "cravings": ""})
        assert entry.mood is None
        assert entry.cravings is None

    def test_unknown_mood_rejected(self) -> None:
        with pytest.raises(ValueError):
            LogEntry.model_validate({"date": "2024-01-02", "mood": "Ecstatic"})


class TestMerge:
    def test_appends_new_date(self, profile_with_logs: UserProfile) -> None:
        entry = LogEntry(date=date(2024, 1, 6), symptoms=["Acne"])
        merged = merge(profile_with_logs.symptoms_log, entry)
        assert len(merged) == 5
        assert merged[-1] == entry

    def test_replaces_existing_date(self, profile_with_logs: UserProfile) -> None:
        entry = LogEntry(date=date(2024, 1, 3), mood=Mood.happy)
        merged = merge(profile_with_logs.symptoms_log, entry)
        assert len(merged) == 4
        assert [e.date for e in merged].count(date(2024, 1, 3)) == 1
        # replaced entry moves to the end
        assert merged[-1] == entry

    def test_same_entry_twice_is_idempotent(self, profile_with_logs: UserProfile) -> None:
        entry = LogEntry(date=date(2024, 1, 3), symptoms=["Headache"])
        once = merge(profile_with_logs.symptoms_log, entry)
        twice = merge(once, entry)
        assert once == twice

    def test_does_not_mutate_input(self, profile_with_logs: UserProfile) -> None:
        original = list(profile_with_logs.symptoms_log)
        merge(profile_with_logs.symptoms_log, LogEntry(date=date(2024, 1, 2)))
        assert profile_with_logs.symptoms_log == original


class TestLookups:
    def test_entry_for_existing_day(self, profile_with_logs: UserProfile) -> None:
        assert entry_for(profile_with_logs.symptoms_log, date(2024, 1, 2)).mood is Mood.sad

    def test_entry_for_missing_day_is_empty(self, profile_with_logs: UserProfile) -> None:
        entry = entry_for(profile_with_logs.symptoms_log, date(2024, 2, 1))
        assert entry.date == date(2024, 2, 1)
        assert entry.symptoms == []
        assert entry.mood is None
        assert entry.cravings is None

    def test_recent_keeps_last_entries_in_order(self, profile_with_logs: UserProfile) -> None:
        dates = [e.date.day for e in recent(profile_with_logs.symptoms_log)]
        assert dates == [3, 4, 5]

    def test_recent_shorter_log(self) -> None:
        log = [LogEntry(date=date(2024, 1, 1))]
        assert recent(log, 3) == log
        assert recent(log, 0) == []


class TestUpsert:
    @pytest.mark.asyncio
    async def test_writes_whole_array(
        self, mock_profile_store: MagicMock, profile_with_logs: UserProfile
    ) -> None:
        entry = LogEntry(date=date(2024, 1, 6), symptoms=["Tiredness"], cravings=Craving.spicy)
        result = await SymptomLogStore(mock_profile_store).upsert(
            TEST_USER_ID, profile_with_logs, entry
        )

        assert result.ok
        assert result.status is SaveStatus.saved
        mock_profile_store.replace_field.assert_awaited_once()
        user_id, field, value = mock_profile_store.replace_field.await_args.args
        assert (user_id, field) == (TEST_USER_ID, LOG_FIELD)
        assert len(value) == 5
        assert value[-1] == {
            "date": "2024-01-06",
            "symptoms": ["Tiredness"],
            "mood": None,
            "cravings": "Spicy",
        }

    @pytest.mark.asyncio
    async def test_second_save_same_day_keeps_one_entry(
        self, mock_profile_store: MagicMock, onboarded_profile: UserProfile
    ) -> None:
        log_store = SymptomLogStore(mock_profile_store)
        first = await log_store.upsert(
            TEST_USER_ID, onboarded_profile, LogEntry(date=date(2024, 1, 7), mood=Mood.sad)
        )
        updated = onboarded_profile.model_copy(update={"symptoms_log": first.entries})
        second = await log_store.upsert(
            TEST_USER_ID, updated, LogEntry(date=date(2024, 1, 7), mood=Mood.happy)
        )
        assert len(second.entries) == 1
        assert second.entries[0].mood is Mood.happy

    @pytest.mark.asyncio
    async def test_store_failure_reported_not_retried(
        self, profile_with_logs: UserProfile
    ) -> None:
        store = MagicMock()
        store.replace_field = AsyncMock(side_effect=ProfileStoreError("connection reset"))

        result = await SymptomLogStore(store).upsert(
            TEST_USER_ID, profile_with_logs, LogEntry(date=date(2024, 1, 6))
        )

        assert not result.ok
        assert result.status is SaveStatus.failed
        assert "connection reset" in result.error
        store.replace_field.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_profile_not_mutated(
        self, mock_profile_store: MagicMock, profile_with_logs: UserProfile
    ) -> None:
        await SymptomLogStore(mock_profile_store).upsert(
            TEST_USER_ID, profile_with_logs, LogEntry(date=date(2024, 1, 6))
        )
        assert len(profile_with_logs.symptoms_log) == 4

    @pytest.mark.asyncio
    async def test_missing_profile_propagates(self, profile_with_logs: UserProfile) -> None:
        store = MagicMock()
        store.replace_field = AsyncMock(side_effect=ProfileNotFoundError("no document"))

        with pytest.raises(ProfileNotFoundError):
            await SymptomLogStore(store).upsert(
                TEST_USER_ID, profile_with_logs, LogEntry(date=date(2024, 1, 6))
            )
