"""End-to-end pipeline tests with the model, storage and throttle patched out."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from conftest import make_plan, make_profile
from workout_ai.core.errors import (
    InvalidPlanSchema,
    ModelError,
    NoJsonFound,
    PermissionDenied,
    PlanNotFound,
    ProfileMissing,
    RateLimited,
)
from workout_ai.schemas.generation import AdaptiveRequest, GenerationRequest, SessionHistoryEntry
from workout_ai.services.history_sampler import HistorySample
from workout_ai.services.model_invoker import CompletionResult
from workout_ai.services import workout_generator

MODULE = "workout_ai.services.workout_generator"


class Pipeline:
    """Patches every collaborator of the generator and records what was stored."""

    def __init__(self, raw_text, profile=None, history=None, previous=None):
        self.inserted = []
        self.profile = profile or make_profile()
        self.patches = [
            patch(f"{MODULE}.check_and_record", new=AsyncMock(return_value=None)),
            patch(f"{MODULE}.resolve_profile", new=AsyncMock(return_value=self.profile)),
            patch(f"{MODULE}.read_canonical_profile", new=AsyncMock(return_value=self.profile)),
            patch(f"{MODULE}.sample_history", new=AsyncMock(return_value=HistorySample(history=history or []))),
            patch(f"{MODULE}.get_plan", new=AsyncMock(return_value=previous)),
            patch(f"{MODULE}.insert_plan", new=AsyncMock(side_effect=self._insert)),
            patch(
                f"{MODULE}.invoke_model",
                new=AsyncMock(return_value=CompletionResult(text=raw_text, usage={"total_tokens": 900})),
            ),
        ]
        self.mocks = {}

    async def _insert(self, session, **kwargs):
        self.inserted.append(kwargs)
        return SimpleNamespace(
            id=100 + len(self.inserted),
            plan=kwargs["plan"].model_dump(mode="json", exclude_none=True),
            ai_generated=True,
            personalized_for=kwargs["personalized_for"],
        )

    def __enter__(self):
        for p in self.patches:
            mock = p.start()
            self.mocks[p.attribute] = mock
        return self

    def __exit__(self, *exc):
        for p in self.patches:
            p.stop()
        return False


def _previous(**overrides):
    record = {
        "id": 55,
        "user_id": 7,
        "name": "Foundations Strength",
        "type": "strength_training",
        "estimated_duration": 45,
        "equipment": ["bodyweight"],
        "training_load_index": None,
    }
    record.update(overrides)
    return SimpleNamespace(**record)


@pytest.mark.asyncio
async def test_generate_filters_equipment_to_allowed():
    """Beginner, no history: plan asks for dumbbells the user does not own."""
    with Pipeline(json.dumps(make_plan())) as pipe:
        response = await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))

    assert response.success is True
    assert response.workout_plan["equipment"] == ["bodyweight"]
    assert response.workout_plan["id"] == 101
    assert response.workout_plan["ai_generated"] is True
    assert response.workout_plan["personalized_for"]["fitness_level"] == "beginner"
    assert response.adaptations is None

    stored = pipe.inserted[0]
    assert stored["progression_level"] == 1
    assert stored["source"] == "ai"
    assert stored["usage"] == {"total_tokens": 900}
    assert stored["dedupe_key"] == response.dedupe_key
    pipe.mocks["check_and_record"].assert_awaited_once_with(7, "generate_workout", redis_client=None)


@pytest.mark.asyncio
async def test_generate_accepts_fenced_response_with_prose():
    raw = "Here is your workout!\n```json\n" + json.dumps(make_plan()) + "\n```"
    with Pipeline(raw) as pipe:
        response = await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
    assert response.workout_plan["name"] == "Foundations Strength"
    assert len(pipe.inserted) == 1


@pytest.mark.asyncio
async def test_generate_prose_only_persists_nothing():
    with Pipeline("I'm sorry, I can't create a workout right now.") as pipe:
        with pytest.raises(NoJsonFound):
            await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
    assert pipe.inserted == []


@pytest.mark.asyncio
async def test_generate_invalid_plan_persists_nothing():
    with Pipeline(json.dumps(make_plan(estimated_duration=500))) as pipe:
        with pytest.raises(InvalidPlanSchema):
            await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
    assert pipe.inserted == []


@pytest.mark.asyncio
async def test_generate_uses_history_for_level_and_explicit_level_wins():
    history = [SessionHistoryEntry(workout_type="strength_training", rating=5, exercises=["squat"]) for _ in range(5)]
    with Pipeline(json.dumps(make_plan()), history=history) as pipe:
        await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
        await workout_generator.generate_workout(
            None, 7, GenerationRequest(workout_type="strength_training", progression_level=9)
        )
    assert [row["progression_level"] for row in pipe.inserted] == [2, 9]


@pytest.mark.asyncio
async def test_generate_same_inputs_same_dedupe_key_and_client_key_wins():
    with Pipeline(json.dumps(make_plan())) as pipe:
        first = await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
        second = await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
        third = await workout_generator.generate_workout(
            None, 7, GenerationRequest(workout_type="strength_training", idempotency_key="client-abc-123")
        )
    assert first.dedupe_key == second.dedupe_key
    assert third.dedupe_key == "client-abc-123"
    assert len(pipe.inserted) == 3


@pytest.mark.asyncio
async def test_generate_stops_at_rate_limit_before_model_call():
    with Pipeline(json.dumps(make_plan())) as pipe:
        pipe.mocks["check_and_record"].side_effect = RateLimited("Please wait", retry_after=9)
        with pytest.raises(RateLimited):
            await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
        pipe.mocks["invoke_model"].assert_not_awaited()
    assert pipe.inserted == []


@pytest.mark.asyncio
async def test_generate_missing_profile():
    with Pipeline(json.dumps(make_plan())) as pipe:
        pipe.mocks["resolve_profile"].side_effect = ProfileMissing(user_id=7)
        with pytest.raises(ProfileMissing):
            await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
        pipe.mocks["invoke_model"].assert_not_awaited()


@pytest.mark.asyncio
async def test_generate_model_error_propagates():
    with Pipeline("") as pipe:
        pipe.mocks["invoke_model"].side_effect = ModelError("Empty model response")
        with pytest.raises(ModelError):
            await workout_generator.generate_workout(None, 7, GenerationRequest(workout_type="strength_training"))
    assert pipe.inserted == []


def _adaptive(**overrides):
    data = {
        "previous_workout_id": 55,
        "performance_rating": 5,
        "completion_rate": 0.95,
        "difficulty_feedback": "too_easy",
        "time_actual": 45,
    }
    data.update(overrides)
    return AdaptiveRequest(**data)


@pytest.mark.asyncio
async def test_adapt_strong_feedback_moves_up_two_levels():
    with Pipeline(json.dumps(make_plan()), previous=_previous()) as pipe:
        response = await workout_generator.adapt_workout(None, 7, _adaptive())

    assert response.adaptations.new_progression_level == 7
    assert response.adaptations.reason == "too_easy"
    stored = pipe.inserted[0]
    assert stored["source"] == "ai-adaptive"
    assert stored["adapted_from"] == 55
    assert stored["plan"].equipment == ["bodyweight"]
    assert response.workout_plan["personalized_for"]["adapted_from"] == 55
    pipe.mocks["check_and_record"].assert_awaited_once_with(7, "generate_adaptive_workout", redis_client=None)


@pytest.mark.asyncio
async def test_adapt_uses_load_index_snapshot_for_current_level():
    with Pipeline(json.dumps(make_plan()), previous=_previous(training_load_index=1800)) as pipe:
        response = await workout_generator.adapt_workout(
            None, 7, _adaptive(performance_rating=3, completion_rate=0.8, difficulty_feedback="just_right")
        )
    assert response.adaptations.new_progression_level == 3
    assert pipe.inserted[0]["training_load_index"] == 1800


@pytest.mark.asyncio
async def test_adapt_unknown_plan():
    with Pipeline(json.dumps(make_plan()), previous=None) as pipe:
        with pytest.raises(PlanNotFound) as exc_info:
            await workout_generator.adapt_workout(None, 7, _adaptive())
    assert exc_info.value.status_code == 404
    assert pipe.inserted == []


@pytest.mark.asyncio
async def test_adapt_other_users_plan():
    with Pipeline(json.dumps(make_plan()), previous=_previous(user_id=8)) as pipe:
        with pytest.raises(PermissionDenied):
            await workout_generator.adapt_workout(None, 7, _adaptive())
        pipe.mocks["invoke_model"].assert_not_awaited()
    assert pipe.inserted == []


@pytest.mark.asyncio
async def test_generate_passes_previous_plan_ids_to_prompt():
    request = GenerationRequest(workout_type="strength_training", previous_workouts=["101", " 101 ", "102"])
    with Pipeline(json.dumps(make_plan())) as pipe:
        await workout_generator.generate_workout(None, 7, request)
    user_message = pipe.mocks["invoke_model"].await_args.args[1]
    assert "- Recently generated plans (ids) to vary from: 101, 102" in user_message
