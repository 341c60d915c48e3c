"""
Plan generation pipeline: rate limit -> profile -> history -> progression level -> prompt ->
model -> JSON extraction -> schema validation -> equipment constraint -> dedupe key -> insert.
Every failure is a GenerationError and is terminal; nothing is persisted before validation passes.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.ext.asyncio import AsyncSession

from workout_ai.config import settings
from workout_ai.core.errors import (
    GenerationError,
    InvalidPlanSchema,
    ModelError,
    NoJsonFound,
    PermissionDenied,
    PlanNotFound,
)
from workout_ai.core.metrics import GENERATIONS
from workout_ai.core.rate_limit import check_and_record
from workout_ai.core.resolve import resolve
from workout_ai.schemas.generation import Adaptations, AdaptiveRequest, GenerationRequest, GenerationResponse
from workout_ai.schemas.workout_plan import WorkoutPlan
from workout_ai.services.constraints import enforce_equipment
from workout_ai.services.history_sampler import frequent_exercises, sample_history
from workout_ai.services.idempotency import derive_adaptive_key, derive_key
from workout_ai.services.model_invoker import invoke_model
from workout_ai.services.plan_store import get_plan, insert_plan, plan_payload
from workout_ai.services.plan_validator import validate_plan
from workout_ai.services.profile_resolver import read_canonical_profile, resolve_profile, sanitize_list
from workout_ai.services.progression import adapt_level, current_level_from_load, estimate_level
from workout_ai.services.prompt_builder import (
    AdaptivePromptContext,
    PlanPromptContext,
    build_adaptive_prompt,
    build_plan_prompt,
)
from workout_ai.services.response_extractor import extract_json

logger = logging.getLogger(__name__)

GENERATE_OPERATION = "generate_workout"
ADAPT_OPERATION = "generate_adaptive_workout"

# Raw model text kept in logs
LOG_RAW_TEXT_CHARS = 500


@contextmanager
def _track(operation: str) -> Iterator[None]:
    try:
        yield
    except GenerationError as e:
        GENERATIONS.labels(operation=operation, outcome=e.kind).inc()
        raise
    GENERATIONS.labels(operation=operation, outcome="success").inc()


def _parse_plan(raw_text: str, user_id: int) -> WorkoutPlan:
    try:
        json_text = extract_json(raw_text)
    except NoJsonFound:
        logger.error("Model output had no JSON object (user %s): %s", user_id, raw_text[:LOG_RAW_TEXT_CHARS])
        raise
    try:
        return validate_plan(json_text)
    except InvalidPlanSchema as e:
        logger.error(
            "Model JSON failed validation (user %s): issues=%s raw=%s",
            user_id,
            e.issues,
            json_text[:LOG_RAW_TEXT_CHARS],
        )
        raise


async def _complete(system_message: str, user_message: str, user_id: int):
    try:
        return await invoke_model(system_message, user_message)
    except ModelError as e:
        logger.error("Model call failed (user %s, model %s): %s", user_id, settings.gemini_model, e.message)
        raise


async def generate_workout(
    session: AsyncSession,
    user_id: int,
    request: GenerationRequest,
    *,
    redis_client=None,
) -> GenerationResponse:
    """Generate and store a new plan from the user's profile and recent history."""
    with _track(GENERATE_OPERATION):
        await check_and_record(user_id, GENERATE_OPERATION, redis_client=redis_client)

        profile = await resolve_profile(session, user_id, request)
        sample = await sample_history(session, user_id)
        level = resolve(request.progression_level, estimate_level(sample.history, profile.fitness_level))

        messages = build_plan_prompt(
            PlanPromptContext(
                profile=profile,
                workout_type=request.workout_type,
                progression_level=level,
                focus_areas=sanitize_list(request.focus_areas),
                history=sample.history,
                progress=sample.progress,
                frequent_exercises=frequent_exercises(sample.history),
                previous_workouts=sanitize_list(request.previous_workouts),
            )
        )
        completion = await _complete(messages.system_message, messages.user_message, user_id)
        plan = _parse_plan(completion.text, user_id)
        enforce_equipment(plan, profile.available_equipment)

        system = profile.system
        profile_digest = system.profile_digest if system else None
        dedupe_key = derive_key(
            user_id,
            plan.type,
            profile.time_commitment.minutes_per_session,
            level,
            plan.equipment,
            profile_digest,
            explicit_key=request.idempotency_key,
        )
        record = await insert_plan(
            session,
            user_id=user_id,
            plan=plan,
            personalized_for={
                "fitness_level": profile.fitness_level,
                "goals": profile.fitness_goals,
                "equipment": profile.available_equipment,
                "intensity_pref": profile.preferences.intensity,
            },
            source="ai",
            model=settings.gemini_model,
            usage=completion.usage,
            profile_digest=profile_digest,
            training_load_index=system.training_load_index if system else None,
            progression_level=level,
            dedupe_key=dedupe_key,
        )
        logger.info("Workout generated: user=%s plan=%s level=%s model=%s", user_id, record.id, level, settings.gemini_model)
        return GenerationResponse(workout_plan=plan_payload(record), dedupe_key=dedupe_key)


async def adapt_workout(
    session: AsyncSession,
    user_id: int,
    request: AdaptiveRequest,
    *,
    redis_client=None,
) -> GenerationResponse:
    """Generate a follow-up plan from feedback on one of the user's previous plans."""
    with _track(ADAPT_OPERATION):
        await check_and_record(user_id, ADAPT_OPERATION, redis_client=redis_client)

        previous = await get_plan(session, request.previous_workout_id)
        if previous is None:
            raise PlanNotFound(plan_id=request.previous_workout_id)
        if previous.user_id != user_id:
            logger.warning("User %s requested adaptation of plan %s owned by another user", user_id, previous.id)
            raise PermissionDenied(plan_id=previous.id)

        profile = await read_canonical_profile(session, user_id)
        system = profile.system
        load_index = resolve(previous.training_load_index, system.training_load_index if system else None)
        adapted = adapt_level(
            current_level_from_load(load_index),
            request.performance_rating,
            request.completion_rate,
            request.difficulty_feedback,
            request.time_actual,
            previous.estimated_duration,
        )

        messages = build_adaptive_prompt(
            AdaptivePromptContext(
                previous_plan={
                    "name": previous.name,
                    "type": previous.type,
                    "estimated_duration": previous.estimated_duration,
                    "equipment": previous.equipment,
                },
                performance_rating=request.performance_rating,
                completion_rate=request.completion_rate,
                difficulty_feedback=request.difficulty_feedback,
                time_actual=request.time_actual,
                progression_level=adapted.level,
            )
        )
        completion = await _complete(messages.system_message, messages.user_message, user_id)
        plan = _parse_plan(completion.text, user_id)
        enforce_equipment(plan, resolve(previous.equipment, profile.available_equipment))

        dedupe_key = derive_adaptive_key(user_id, previous.id, adapted.level, plan.equipment)
        record = await insert_plan(
            session,
            user_id=user_id,
            plan=plan,
            personalized_for={
                "adapted_from": previous.id,
                "reason": request.difficulty_feedback,
                "fitness_level": profile.fitness_level,
            },
            source="ai-adaptive",
            model=settings.gemini_model,
            usage=completion.usage,
            profile_digest=system.profile_digest if system else None,
            training_load_index=load_index,
            progression_level=adapted.level,
            dedupe_key=dedupe_key,
            adapted_from=previous.id,
        )
        logger.info(
            "Adaptive workout generated: user=%s plan=%s from=%s level=%s (%s)",
            user_id,
            record.id,
            previous.id,
            adapted.level,
            "; ".join(adapted.reasons) or "no change",
        )
        return GenerationResponse(
            workout_plan=plan_payload(record),
            dedupe_key=dedupe_key,
            adaptations=Adaptations(new_progression_level=adapted.level, reason=request.difficulty_feedback),
        )
