"""Append-only persistence of generated plans."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_ai.models.workout_plan import WorkoutPlanRecord
from workout_ai.schemas.workout_plan import WorkoutPlan


async def get_plan(session: AsyncSession, plan_id: int) -> WorkoutPlanRecord | None:
    r = await session.execute(select(WorkoutPlanRecord).where(WorkoutPlanRecord.id == plan_id))
    return r.scalar_one_or_none()


async def insert_plan(
    session: AsyncSession,
    *,
    user_id: int,
    plan: WorkoutPlan,
    personalized_for: dict[str, Any],
    source: str,
    model: str | None,
    usage: dict[str, Any] | None,
    profile_digest: str | None,
    training_load_index: int | None,
    progression_level: int,
    dedupe_key: str,
    adapted_from: int | None = None,
) -> WorkoutPlanRecord:
    """Insert a new plan row (never updates an existing one) and flush to get its id."""
    record = WorkoutPlanRecord(
        user_id=user_id,
        name=plan.name,
        type=plan.type,
        difficulty=plan.difficulty,
        estimated_duration=plan.estimated_duration,
        equipment=list(plan.equipment),
        plan=plan.model_dump(mode="json", exclude_none=True),
        ai_generated=True,
        personalized_for=personalized_for,
        source=source,
        model=model,
        usage=usage,
        profile_digest=profile_digest,
        training_load_index=training_load_index,
        progression_level=progression_level,
        dedupe_key=dedupe_key,
        status="ready",
        adapted_from=adapted_from,
    )
    session.add(record)
    await session.flush()
    return record


def plan_payload(record: WorkoutPlanRecord) -> dict[str, Any]:
    """Stored plan body plus id and server-side enrichments, as returned to the caller."""
    return {
        "id": record.id,
        **record.plan,
        "ai_generated": record.ai_generated,
        "personalized_for": record.personalized_for,
    }
