"""Recent sessions and progress metrics used to personalize the next plan."""

from collections import Counter
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_ai.config import settings
from workout_ai.models.progress_metric import ProgressMetric
from workout_ai.models.workout_session import WorkoutSession
from workout_ai.schemas.generation import ProgressRecord, SessionHistoryEntry

# Free-text feedback is user input that ends up in the prompt
FEEDBACK_MAX_CHARS = 280
# An exercise done this many times in the sampled sessions is flagged as "avoid repeating"
FREQUENT_EXERCISE_THRESHOLD = 3


@dataclass
class HistorySample:
    history: list[SessionHistoryEntry] = field(default_factory=list)
    progress: list[ProgressRecord] = field(default_factory=list)


def cap_text(text: str | None, limit: int = FEEDBACK_MAX_CHARS) -> str | None:
    if text is None:
        return None
    text = text.strip()
    return text[:limit] if len(text) > limit else text


def _session_to_entry(row: WorkoutSession) -> SessionHistoryEntry:
    duration = None
    if row.start_time and row.end_time:
        duration = round((row.end_time - row.start_time).total_seconds() / 60)
    exercises = [
        str(e.get("exercise_id"))
        for e in (row.completed_exercises or [])
        if isinstance(e, dict) and e.get("exercise_id")
    ]
    return SessionHistoryEntry(
        workout_type=row.workout_type,
        completed_at=row.end_time,
        rating=row.rating,
        feedback=cap_text(row.feedback),
        exercises=exercises,
        duration=duration,
    )


def _metric_to_record(row: ProgressMetric) -> ProgressRecord:
    return ProgressRecord(
        date=row.date,
        metric_type=row.metric_type,
        value=row.value,
        unit=row.unit,
        notes=cap_text(row.notes),
    )


async def list_recent_sessions(session: AsyncSession, user_id: int, limit: int) -> list[SessionHistoryEntry]:
    r = await session.execute(
        select(WorkoutSession)
        .where(WorkoutSession.user_id == user_id)
        .order_by(WorkoutSession.start_time.desc().nulls_last())
        .limit(limit)
    )
    return [_session_to_entry(row) for row in r.scalars().all()]


async def list_recent_progress(session: AsyncSession, user_id: int, limit: int) -> list[ProgressRecord]:
    r = await session.execute(
        select(ProgressMetric)
        .where(ProgressMetric.user_id == user_id)
        .order_by(ProgressMetric.date.desc())
        .limit(limit)
    )
    return [_metric_to_record(row) for row in r.scalars().all()]


async def sample_history(session: AsyncSession, user_id: int) -> HistorySample:
    """Latest sessions and progress metrics, newest first. No history is a valid result."""
    history = await list_recent_sessions(session, user_id, settings.history_session_limit)
    progress = await list_recent_progress(session, user_id, settings.history_progress_limit)
    return HistorySample(history=history, progress=progress)


def frequent_exercises(
    history: list[SessionHistoryEntry],
    threshold: int = FREQUENT_EXERCISE_THRESHOLD,
) -> list[str]:
    """Exercise ids seen at least `threshold` times, in first-seen order."""
    counts: Counter[str] = Counter()
    for entry in history:
        counts.update(entry.exercises)
    return [exercise_id for exercise_id, n in counts.items() if n >= threshold]
