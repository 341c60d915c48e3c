"""Canonical user profile as consumed by plan generation (onboarding output)."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

FitnessLevel = Literal["beginner", "intermediate", "advanced"]
Intensity = Literal["low", "moderate", "high"]
PreferredTime = Literal["morning", "afternoon", "evening", "variable"]

Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
TagList = Annotated[list[Tag], Field(max_length=30)]


class TimeCommitment(BaseModel):
    days_per_week: int = Field(..., ge=1, le=7)
    minutes_per_session: int = Field(..., ge=10, le=180)
    preferred_times: list[PreferredTime] = Field(..., min_length=1, max_length=4)


class Preferences(BaseModel):
    workout_types: TagList = Field(default_factory=list)
    intensity: Intensity
    rest_day_preference: int = Field(..., ge=0, le=6, description="0 = Sunday")
    injuries_or_limitations: TagList = Field(default_factory=list)


class SystemMetrics(BaseModel):
    """Derived by the profile write path; every field may be absent."""

    weekly_minutes: int | None = Field(None, ge=10, le=1260)
    intensity_score: int | None = Field(None, ge=1, le=3)
    training_load_index: int | None = Field(None, ge=10, le=10000)  # weekly_minutes * intensity_score
    profile_digest: str | None = Field(None, min_length=64, max_length=64)


class UserProfile(BaseModel):
    """Tolerant of unknown fields; strict on ranges."""

    model_config = ConfigDict(extra="ignore")

    fitness_level: FitnessLevel
    fitness_goals: TagList = Field(default_factory=list)
    available_equipment: TagList = Field(default_factory=list)
    time_commitment: TimeCommitment
    preferences: Preferences
    system: SystemMetrics | None = None
