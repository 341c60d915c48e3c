from workout_ai.schemas.workout_plan import WorkoutPlan

BODYWEIGHT = "bodyweight"


def pick_allowed_equipment(plan_equipment: list[str], allowed_equipment: list[str]) -> list[str]:
    """
    Case-insensitive intersection, keeping the plan's order and spelling.
    Bodyweight is always allowed; an empty result falls back to ["bodyweight"].
    """
    allowed = {e.lower() for e in allowed_equipment}
    safe: dict[str, None] = {}
    for item in plan_equipment:
        if item.lower() in allowed or item.lower() == BODYWEIGHT:
            safe.setdefault(item, None)
    return list(safe) or [BODYWEIGHT]


def enforce_equipment(plan: WorkoutPlan, allowed_equipment: list[str]) -> WorkoutPlan:
    """Drop plan-level equipment the user does not have. Only plan.equipment changes."""
    plan.equipment = pick_allowed_equipment(plan.equipment, allowed_equipment)
    return plan
