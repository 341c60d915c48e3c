"""
Workout plan schema: the single description of what the model must return.
Rendered into the prompt by describe_schema() and enforced by the plan validator.
"""

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

Difficulty = Literal["beginner", "intermediate", "advanced"]

TinyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
ShortStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=160)]
LongStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]

# No coercion: "5" is not an int, a single bad exercise rejects the whole plan
_PLAN_CONFIG = ConfigDict(strict=True, extra="ignore")


def _integral_float_to_int(value: Any) -> Any:
    """Models often write 3.0 for 3. Only that case is converted; 3.5 and "3" stay invalid."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class Exercise(BaseModel):
    model_config = _PLAN_CONFIG

    name: TinyStr
    description: LongStr
    instructions: list[ShortStr] = Field(..., min_length=1, max_length=12)
    target_muscles: list[TinyStr] = Field(..., min_length=1, max_length=10)
    equipment: list[TinyStr] = Field(..., max_length=10)
    difficulty: Difficulty
    sets: int = Field(..., ge=1, le=10)
    reps: int | None = Field(None, ge=1, le=50)
    duration: int | None = Field(None, ge=5, le=3600, description="seconds")
    rest_time: int = Field(..., ge=0, le=600, description="seconds")
    tips: list[ShortStr] = Field(..., max_length=10)
    progression_notes: LongStr | None = None
    alternatives: list[TinyStr] | None = Field(None, max_length=8)
    form_cues: list[ShortStr] | None = Field(None, max_length=10)

    @field_validator("sets", "reps", "duration", "rest_time", mode="before")
    @classmethod
    def accept_integral_floats(cls, value: Any) -> Any:
        return _integral_float_to_int(value)


class WorkoutPlan(BaseModel):
    model_config = _PLAN_CONFIG

    name: TinyStr
    description: LongStr
    type: TinyStr
    difficulty: Difficulty
    estimated_duration: int = Field(..., ge=10, le=180, description="minutes")
    exercises: list[Exercise] = Field(..., min_length=1, max_length=40)
    equipment: list[TinyStr] = Field(..., max_length=20)
    target_muscles: list[TinyStr] = Field(..., max_length=20)
    warm_up: list[Exercise] | None = Field(None, max_length=10)
    cool_down: list[Exercise] | None = Field(None, max_length=10)
    progression_tips: list[ShortStr] | None = Field(None, max_length=10)
    motivational_quote: ShortStr | None = None
    calorie_estimate: int | None = Field(None, ge=50, le=1500)

    @field_validator("estimated_duration", "calorie_estimate", mode="before")
    @classmethod
    def accept_integral_floats(cls, value: Any) -> Any:
        return _integral_float_to_int(value)


def _bounds(lo: Any, hi: Any, unit: str) -> str | None:
    if lo is not None and hi is not None:
        return f"{lo}-{hi}{unit}"
    if lo is not None:
        return f">= {lo}{unit}"
    if hi is not None:
        return f"<= {hi}{unit}"
    return None


def _describe_type(prop: dict[str, Any]) -> str:
    if "$ref" in prop:
        return prop["$ref"].rsplit("/", 1)[-1]
    if "anyOf" in prop:
        options = [p for p in prop["anyOf"] if p.get("type") != "null"]
        return " | ".join(_describe_type(p) for p in options)
    if "enum" in prop:
        return "one of " + ", ".join(json.dumps(v) for v in prop["enum"])
    kind = prop.get("type", "any")
    if kind == "array":
        text = f"array of {_describe_type(prop.get('items', {}))}"
        size = _bounds(prop.get("minItems"), prop.get("maxItems"), " items")
        return f"{text}, {size}" if size else text
    if kind == "string":
        size = _bounds(prop.get("minLength"), prop.get("maxLength"), " chars")
        return f"string ({size})" if size else "string"
    if kind in ("integer", "number"):
        size = _bounds(prop.get("minimum"), prop.get("maximum"), "")
        return f"{kind} ({size})" if size else kind
    return kind


def _describe_object(name: str, schema: dict[str, Any]) -> list[str]:
    required = set(schema.get("required", []))
    lines = [f"{name} (JSON object):"]
    for field_name, prop in schema.get("properties", {}).items():
        note = "required" if field_name in required else "optional"
        line = f"- {field_name}: {_describe_type(prop)}; {note}"
        if prop.get("description"):
            line += f"; {prop['description']}"
        lines.append(line)
    return lines


def describe_schema(model: type[BaseModel] = WorkoutPlan) -> str:
    """Deterministic, human-readable rendering of a model's JSON schema for prompts."""
    schema = model.model_json_schema()
    lines = _describe_object(model.__name__, schema)
    for def_name in sorted(schema.get("$defs", {})):
        definition = schema["$defs"][def_name]
        if definition.get("type") == "object":
            lines.append("")
            lines.extend(_describe_object(def_name, definition))
    return "\n".join(lines)
