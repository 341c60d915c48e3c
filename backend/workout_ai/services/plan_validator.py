"""All-or-nothing validation of model output against the WorkoutPlan schema."""

from pydantic import ValidationError

from workout_ai.core.errors import InvalidPlanSchema
from workout_ai.schemas.workout_plan import WorkoutPlan


def _issues(error: ValidationError) -> list[dict]:
    return [
        {"loc": ".".join(str(part) for part in issue["loc"]), "msg": issue["msg"], "type": issue["type"]}
        for issue in error.errors()
    ]


def validate_plan(json_text: str) -> WorkoutPlan:
    """Parse and validate; any violation (including malformed JSON) rejects the whole plan."""
    try:
        return WorkoutPlan.model_validate_json(json_text)
    except ValidationError as e:
        issues = _issues(e)
        raise InvalidPlanSchema(f"Plan failed validation ({len(issues)} issues)", issues=issues) from e
