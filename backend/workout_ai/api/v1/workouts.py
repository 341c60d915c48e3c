"""Workouts API: AI plan generation and feedback-driven adaptation."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workout_ai.api.deps import get_current_user, get_rate_limit_redis
from workout_ai.db import get_db
from workout_ai.models.user import User
from workout_ai.schemas.generation import AdaptiveRequest, GenerationRequest, GenerationResponse
from workout_ai.services import workout_generator

router = APIRouter(prefix="/workouts", tags=["workouts"])

_ERROR_RESPONSES = {
    401: {"description": "Not authenticated"},
    429: {"description": "Generation rate limit exceeded (see Retry-After)"},
    502: {"description": "Model failed or returned an invalid plan"},
    504: {"description": "Model call timed out"},
}


@router.post(
    "/generate",
    response_model=GenerationResponse,
    summary="Generate a personalized workout plan",
    responses={**_ERROR_RESPONSES, 412: {"description": "No profile; complete onboarding"}},
)
async def generate_workout(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    redis_client: Annotated[object, Depends(get_rate_limit_redis)],
    body: GenerationRequest,
) -> GenerationResponse:
    """
    Build a single-session plan from the stored profile (or, on first run, the profile fields
    in the body), the last sessions and progress metrics. The plan is stored and returned with
    its dedupe key.
    """
    return await workout_generator.generate_workout(session, user.id, body, redis_client=redis_client)


@router.post(
    "/adapt",
    response_model=GenerationResponse,
    summary="Generate an adapted plan from session feedback",
    responses={
        **_ERROR_RESPONSES,
        403: {"description": "Previous workout belongs to another user"},
        404: {"description": "Previous workout not found"},
        412: {"description": "No profile; complete onboarding"},
    },
)
async def adapt_workout(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    redis_client: Annotated[object, Depends(get_rate_limit_redis)],
    body: AdaptiveRequest,
) -> GenerationResponse:
    """Adjust the progression level from feedback on a previous plan and generate the next one."""
    return await workout_generator.adapt_workout(session, user.id, body, redis_client=redis_client)
