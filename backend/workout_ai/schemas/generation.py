"""Request/response bodies for plan generation and the history context fed into prompts."""

import datetime as dt
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from workout_ai.schemas.profile import FitnessLevel, Preferences, TagList, TimeCommitment

Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
PlanId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]
DifficultyFeedback = Literal["too_easy", "just_right", "too_hard"]


class GenerationRequest(BaseModel):
    """Body for POST /workouts/generate. Profile fields are used only on first run (no stored profile)."""

    model_config = ConfigDict(extra="forbid")

    workout_type: Tag
    progression_level: int | None = Field(None, ge=1, le=10)
    focus_areas: list[Tag] | None = Field(None, max_length=8)
    previous_workouts: list[PlanId] | None = Field(None, max_length=20)
    fitness_level: FitnessLevel | None = None
    fitness_goals: TagList | None = None
    available_equipment: TagList | None = None
    time_commitment: TimeCommitment | None = None
    preferences: Preferences | None = None
    idempotency_key: str | None = Field(None, min_length=8, max_length=64)


class AdaptiveRequest(BaseModel):
    """Body for POST /workouts/adapt: feedback on a previously generated plan."""

    model_config = ConfigDict(extra="forbid")

    previous_workout_id: int = Field(..., ge=1)
    performance_rating: float = Field(..., ge=1, le=5)
    completion_rate: float = Field(..., ge=0, le=1)
    difficulty_feedback: DifficultyFeedback
    time_actual: int = Field(..., ge=5, le=600, description="minutes")


class SessionHistoryEntry(BaseModel):
    workout_type: str | None = None
    completed_at: dt.datetime | None = None
    rating: int | None = None
    feedback: str | None = None
    exercises: list[str] = Field(default_factory=list)
    duration: int | None = None  # minutes, from start/end


class ProgressRecord(BaseModel):
    date: dt.date
    metric_type: str
    value: float | None = None
    unit: str | None = None
    notes: str | None = None


class Adaptations(BaseModel):
    new_progression_level: int
    reason: DifficultyFeedback


class GenerationResponse(BaseModel):
    success: bool = True
    workout_plan: dict[str, Any]
    dedupe_key: str
    adaptations: Adaptations | None = None
