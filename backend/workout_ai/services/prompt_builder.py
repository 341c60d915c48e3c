"""
Prompt templates for plan generation and adaptation.
Pure functions of typed context objects: identical input always yields identical prompts.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from workout_ai.schemas.generation import ProgressRecord, SessionHistoryEntry
from workout_ai.schemas.profile import UserProfile
from workout_ai.schemas.workout_plan import describe_schema

# How much history the user message carries (the full sample still drives estimation)
PROMPT_HISTORY_SAMPLE = 5
PROMPT_PROGRESS_SAMPLE = 3

SYSTEM_PROMPT = "\n".join([
    "You are an elite personal trainer and exercise physiologist.",
    "Create highly personalized, progressive workouts that are safe, effective, and motivating.",
    "Requirements:",
    "- Safety first (clear form cues, account for limitations)",
    "- Progressive overload (note how to progress/regress)",
    "- Specificity to goals and equipment only",
    "- Variety without randomness, and respect session time",
    "- Recovery balance and smart rest",
    "Output: STRICT JSON conforming to the provided schema. No comments or markdown.",
])


@dataclass(frozen=True)
class PromptMessages:
    system_message: str
    user_message: str


@dataclass
class PlanPromptContext:
    profile: UserProfile
    workout_type: str
    progression_level: int
    focus_areas: list[str] = field(default_factory=list)
    history: list[SessionHistoryEntry] = field(default_factory=list)
    progress: list[ProgressRecord] = field(default_factory=list)
    frequent_exercises: list[str] = field(default_factory=list)
    previous_workouts: list[str] = field(default_factory=list)


@dataclass
class AdaptivePromptContext:
    previous_plan: dict[str, Any]
    performance_rating: float
    completion_rate: float
    difficulty_feedback: str
    time_actual: int
    progression_level: int


def _join(values: list[str], empty: str = "n/a") -> str:
    return ", ".join(values) or empty


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)


def _profile_lines(profile: UserProfile) -> list[str]:
    tc = profile.time_commitment
    prefs = profile.preferences
    system = profile.system
    weekly = system.weekly_minutes if system and system.weekly_minutes is not None else "n/a"
    load = system.training_load_index if system and system.training_load_index is not None else "n/a"
    return [
        "PROFILE",
        f"- Fitness level: {profile.fitness_level}",
        f"- Goals: {_join(profile.fitness_goals)}",
        f"- Equipment ONLY: {_join(profile.available_equipment, 'bodyweight')}",
        f"- Time: {tc.minutes_per_session} min, {tc.days_per_week} days/week, preferred: {_join(list(tc.preferred_times))}",
        (
            f"- Preferences: types={_join(prefs.workout_types)}, intensity={prefs.intensity}, "
            f"rest-day={prefs.rest_day_preference}, limitations={_join(prefs.injuries_or_limitations, 'none')}"
        ),
        f"- System: weeklyMinutes={weekly}, trainingLoadIndex={load}",
    ]


def _schema_lines() -> list[str]:
    return ["SCHEMA", describe_schema()]


def build_plan_prompt(ctx: PlanPromptContext) -> PromptMessages:
    history = [entry.model_dump(mode="json") for entry in ctx.history[:PROMPT_HISTORY_SAMPLE]]
    progress = [record.model_dump(mode="json") for record in ctx.progress[:PROMPT_PROGRESS_SAMPLE]]
    lines = [
        "Generate a single-session workout tailored to this user:",
        "",
        *_profile_lines(ctx.profile),
        "",
        "SESSION",
        f"- Type: {ctx.workout_type}",
        f"- Focus areas: {_join(ctx.focus_areas, 'general fitness')}",
        f"- Target progression level (1..10): {ctx.progression_level}",
        "",
        "DATA POINTS",
        f"- History sample: {_dump(history)}",
        f"- Recent progress sample: {_dump(progress)}",
        f"- Frequently used exercises to avoid repeating: {_join(ctx.frequent_exercises, 'none')}",
        f"- Recently generated plans (ids) to vary from: {_join(ctx.previous_workouts, 'none')}",
        "",
        *_schema_lines(),
        "",
        "CONSTRAINTS",
        "- Use only the allowed equipment.",
        "- Fit within the allotted minutes including warm-up and cool-down.",
        "- Provide exercise-level instructions, rest_time (sec), and realistic sets/reps or duration.",
        "- Include helpful progression tips and a motivational quote.",
    ]
    return PromptMessages(system_message=SYSTEM_PROMPT, user_message="\n".join(lines))


def build_adaptive_prompt(ctx: AdaptivePromptContext) -> PromptMessages:
    prev = ctx.previous_plan
    lines = [
        "Create an ADAPTIVE workout improving on the prior session.",
        "",
        "PRIOR SESSION",
        f"- Name: {prev.get('name')}",
        f"- Type: {prev.get('type')}",
        f"- Estimated duration: {prev.get('estimated_duration')} min",
        f"- Equipment: {_join(list(prev.get('equipment') or []), 'bodyweight')}",
        "",
        "FEEDBACK",
        f"- Performance rating: {ctx.performance_rating:g}/5",
        f"- Completion rate: {round(ctx.completion_rate * 100)}%",
        f"- Difficulty feedback: {ctx.difficulty_feedback}",
        f"- Time taken: {ctx.time_actual} min",
        "",
        "ADAPTATION TARGET",
        f"- New progression level: {ctx.progression_level} (1..10)",
        "",
        "Rules:",
        "- Preserve theme/type but adjust intensity, volume, and complexity according to feedback.",
        "- Keep equipment constraints identical to previous.",
        "- Maintain or improve movement quality; emphasize form cues and safety.",
        "- Output STRICT JSON for the same schema used previously.",
        "",
        *_schema_lines(),
    ]
    return PromptMessages(system_message=SYSTEM_PROMPT, user_message="\n".join(lines))
