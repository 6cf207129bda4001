"""Pydantic models for the user profile document, symptom log entries,
projections, guidance content and advisory insights."""

from __future__ import annotations

import datetime as dt
from datetime import date
from enum import Enum
from typing import Annotated, Any

from pydantic import BeforeValidator, Field, field_validator, model_validator

from src.models.base import CycleCareBase


# ---------- Enums ----------

class Gender(str, Enum):
    female = "female"
    male = "male"
    other = "other"
    prefer_not_to_say = "prefer_not_to_say"


class Mood(str, Enum):
    happy = "Happy"
    sad = "Sad"
    okay = "Okay"


class Craving(str, Enum):
    sweet = "Sweet"
    sour = "Sour"
    spicy = "Spicy"


class FertilityLevel(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"


def _blank_to_none(value: Any) -> Any:
    # The front end sends "" for an unselected option
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalGender = Annotated[Gender | None, BeforeValidator(_blank_to_none)]
OptionalMood = Annotated[Mood | None, BeforeValidator(_blank_to_none)]
OptionalCraving = Annotated[Craving | None, BeforeValidator(_blank_to_none)]
OptionalStr = Annotated[str | None, BeforeValidator(_blank_to_none)]
OptionalInt = Annotated[int | None, BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]


# ---------- Symptom log ----------

class LogEntry(CycleCareBase):
    """One day's symptoms, mood and cravings. Unique by ``date`` within a log."""

    date: dt.date
    symptoms: list[str] = Field(default_factory=list)
    mood: OptionalMood = None
    cravings: OptionalCraving = None

    @field_validator("symptoms")
    @classmethod
    def _dedupe_symptoms(cls, value: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for tag in value:
            tag = tag.strip()
            if tag:
                seen.setdefault(tag, None)
        return list(seen)


class LogEntryWrite(CycleCareBase):
    """Request body for saving a day's log. ``date`` defaults to today."""

    date: dt.date | None = None
    symptoms: list[str] = Field(default_factory=list)
    mood: OptionalMood = None
    cravings: OptionalCraving = None


# ---------- Profile document ----------

class UserProfile(CycleCareBase):
    """The per-user profile document as stored.

    Read leniently: a document written by an older client, or one that was
    never completed, still loads. Dates stay as the stored strings and are
    parsed by the projectors, which degrade to "no projection" when a value
    is missing or unparseable.
    """

    age: OptionalInt = None
    gender: OptionalGender = None
    last_period_date: OptionalStr = None
    cycle_length: OptionalInt = None
    period_length: OptionalInt = None
    is_pregnant: bool = False
    pregnancy_due_date: OptionalStr = None
    onboarded: bool = False
    symptoms_log: list[LogEntry] = Field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON document shape."""
        return self.model_dump(mode="json", by_alias=True)


class OnboardingRequest(CycleCareBase):
    """Answers collected by the onboarding flow."""

    age: int = Field(gt=0, lt=130)
    gender: Gender = Gender.female
    last_period_date: date
    cycle_length: int = Field(default=28, gt=0)
    period_length: int = Field(default=5, gt=0)
    is_pregnant: bool = False
    pregnancy_due_date: OptionalDate = None

    @model_validator(mode="after")
    def _period_shorter_than_cycle(self) -> OnboardingRequest:
        if self.period_length >= self.cycle_length:
            raise ValueError("periodLength must be shorter than cycleLength")
        return self

    def to_profile(self) -> UserProfile:
        """Build the initial profile document: onboarded, empty log."""
        return UserProfile(
            age=self.age,
            gender=self.gender,
            last_period_date=self.last_period_date.isoformat(),
            cycle_length=self.cycle_length,
            period_length=self.period_length,
            is_pregnant=self.is_pregnant,
            pregnancy_due_date=(
                self.pregnancy_due_date.isoformat() if self.pregnancy_due_date else None
            ),
            onboarded=True,
            symptoms_log=[],
        )


# ---------- Projections ----------

class CycleProjectionRead(CycleCareBase):
    next_period_start: date
    period_end: date
    ovulation_date: date
    fertile_start: date
    fertile_end: date
    current_cycle_day: int
    is_in_period: bool
    is_fertile: bool
    fertility_level: FertilityLevel
    status: str
    cycle_length: int
    period_length: int


class PregnancyProjectionRead(CycleCareBase):
    gestational_week: int
    extra_days: int = Field(ge=0, le=6)
    weekly_insight_title: str
    weekly_insight: str


# ---------- Guidance ----------

class SymptomInfoRead(CycleCareBase):
    symptom: str
    reason: str
    remedies: list[str]


class CravingSwapsRead(CycleCareBase):
    craving: Craving
    suggestions: list[str]


class NutritionTipRead(CycleCareBase):
    title: str
    content: str


# ---------- Insights ----------

class InsightQuery(CycleCareBase):
    text: str = Field(min_length=1, max_length=2000)


class InsightRead(CycleCareBase):
    answer: str
    disclaimer: str
