"""Tests for the equipment constraint applied to generated plans."""

import json

from workout_ai.services.constraints import enforce_equipment, pick_allowed_equipment
from workout_ai.services.plan_validator import validate_plan


def test_disallowed_equipment_dropped():
    assert pick_allowed_equipment(["dumbbells", "bodyweight"], ["bodyweight"]) == ["bodyweight"]


def test_case_insensitive_keeps_plan_spelling_and_order():
    assert pick_allowed_equipment(["Kettlebell", "Mat", "Dumbbells"], ["dumbbells", "kettlebell"]) == [
        "Kettlebell",
        "Dumbbells",
    ]


def test_empty_result_falls_back_to_bodyweight():
    assert pick_allowed_equipment([], []) == ["bodyweight"]
    assert pick_allowed_equipment(["barbell"], ["dumbbells"]) == ["bodyweight"]


def test_duplicates_removed():
    assert pick_allowed_equipment(["bands", "bands"], ["bands"]) == ["bands"]


def test_enforce_only_touches_plan_equipment(plan_dict):
    plan = validate_plan(json.dumps(plan_dict))
    enforce_equipment(plan, ["bodyweight"])
    assert plan.equipment == ["bodyweight"]
    assert plan.exercises[1].equipment == ["dumbbells"]
