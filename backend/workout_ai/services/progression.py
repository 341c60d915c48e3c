"""
Progression level (1..10): how hard the next generated plan should be.
Pure functions; no I/O.
"""

import math
from dataclasses import dataclass, field

from workout_ai.schemas.generation import SessionHistoryEntry

MIN_LEVEL = 1
MAX_LEVEL = 10

BASE_LEVEL = {"beginner": 1, "intermediate": 4, "advanced": 7}

# Used when the prior plan and the profile carry no training-load index
DEFAULT_ADAPTIVE_LEVEL = 5
# training_load_index per level step (weekly_minutes * intensity_score)
LOAD_INDEX_PER_LEVEL = 900
# Prior plan without an estimated duration
DEFAULT_ESTIMATED_DURATION = 45

FAST_COMPLETION_RATIO = 0.8
SLOW_COMPLETION_RATIO = 1.3


def clamp_level(value: float) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, int(value)))


def round_half_up(value: float) -> int:
    """5.5 -> 6, -0.5 -> 0 (Python's round() would give banker's rounding)."""
    return math.floor(value + 0.5)


def estimate_level(history: list[SessionHistoryEntry], fitness_level: str) -> int:
    """
    Base level from fitness level, +1 after 5+ completed sessions averaging >= 4,
    another +1 after 10+ completed sessions averaging >= 4.5.
    Completed = rating >= 3. Unrated sessions are left out of the average.
    """
    base = BASE_LEVEL.get(fitness_level, BASE_LEVEL["beginner"])
    if not history:
        return base
    ratings = [entry.rating for entry in history if entry.rating is not None]
    if not ratings:
        return clamp_level(base)
    completed = sum(1 for r in ratings if r >= 3)
    avg = sum(ratings) / len(ratings)
    level = base
    if completed >= 5 and avg >= 4:
        level += 1
    if completed >= 10 and avg >= 4.5:
        level += 1
    return clamp_level(level)


def current_level_from_load(training_load_index: int | None) -> int:
    if not training_load_index or training_load_index <= 0:
        return DEFAULT_ADAPTIVE_LEVEL
    return clamp_level(round_half_up(training_load_index / LOAD_INDEX_PER_LEVEL) + 1)


@dataclass
class AdaptResult:
    level: int
    adjustment: float
    reasons: list[str] = field(default_factory=list)


def adapt_level(
    current_level: int,
    performance_rating: float,
    completion_rate: float,
    difficulty_feedback: str,
    time_actual: int,
    estimated_duration: int | None,
) -> AdaptResult:
    """Sum independent feedback adjustments, round half up, clamp to 1..10."""
    estimated = estimated_duration or DEFAULT_ESTIMATED_DURATION
    adjustment = 0.0
    reasons: list[str] = []

    if performance_rating >= 4 and completion_rate >= 0.9:
        adjustment += 1
        reasons.append("strong performance")
    if performance_rating <= 2 or completion_rate < 0.7:
        adjustment -= 1
        reasons.append("low rating or incomplete session")
    if difficulty_feedback == "too_easy":
        adjustment += 1
        reasons.append("reported too easy")
    elif difficulty_feedback == "too_hard":
        adjustment -= 1
        reasons.append("reported too hard")
    if time_actual < estimated * FAST_COMPLETION_RATIO:
        adjustment += 0.5
        reasons.append("finished well under the estimated time")
    elif time_actual > estimated * SLOW_COMPLETION_RATIO:
        adjustment -= 0.5
        reasons.append("took much longer than estimated")

    level = clamp_level(round_half_up(current_level + adjustment))
    return AdaptResult(level=level, adjustment=adjustment, reasons=reasons)
