"""Canonical profile lookup with the first-run fallback to client-supplied fields."""

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_ai.core.errors import ProfileMissing
from workout_ai.core.resolve import resolve
from workout_ai.models.user_profile import UserProfileRecord
from workout_ai.schemas.generation import GenerationRequest
from workout_ai.schemas.profile import UserProfile

logger = logging.getLogger(__name__)


def sanitize_list(values: list[str] | None) -> list[str]:
    """Trim, drop empties, de-duplicate keeping first occurrence."""
    seen: dict[str, None] = {}
    for value in values or []:
        item = value.strip()
        if item:
            seen.setdefault(item, None)
    return list(seen)


async def fetch_profile(session: AsyncSession, user_id: int) -> UserProfileRecord | None:
    r = await session.execute(select(UserProfileRecord).where(UserProfileRecord.user_id == user_id))
    return r.scalar_one_or_none()


def profile_from_override(request: GenerationRequest | None) -> UserProfile | None:
    """Synthesize a profile from request fields; None unless level, time commitment and preferences are all present."""
    if request is None:
        return None
    if request.fitness_level is None or request.time_commitment is None or request.preferences is None:
        return None
    return UserProfile(
        fitness_level=request.fitness_level,
        fitness_goals=sanitize_list(resolve(request.fitness_goals, default=[])),
        available_equipment=sanitize_list(resolve(request.available_equipment, default=[])),
        time_commitment=request.time_commitment,
        preferences=request.preferences,
    )


async def read_canonical_profile(session: AsyncSession, user_id: int) -> UserProfile:
    """Stored profile only (adaptive generation has no override path)."""
    return await resolve_profile(session, user_id, None)


async def resolve_profile(
    session: AsyncSession,
    user_id: int,
    override: GenerationRequest | None,
) -> UserProfile:
    """
    Precedence: stored profile > complete client override > ProfileMissing.
    A stored profile that no longer matches the schema is treated as absent.
    """
    stored: UserProfile | None = None
    row = await fetch_profile(session, user_id)
    if row is not None:
        try:
            stored = UserProfile.model_validate(row.to_payload())
        except ValidationError as e:
            logger.error("Stored profile for user %s failed validation: %s", user_id, e.errors())

    profile = resolve(stored, profile_from_override(override))
    if profile is None:
        raise ProfileMissing(user_id=user_id)
    if stored is None:
        logger.info("Using client-supplied profile for user %s (no stored profile)", user_id)
    return profile
