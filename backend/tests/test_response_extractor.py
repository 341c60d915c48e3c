"""Tests for pulling a JSON object out of model text."""

import pytest

from workout_ai.core.errors import NoJsonFound
from workout_ai.services.response_extractor import extract_json


def test_bare_object_is_returned_trimmed():
    assert extract_json('  {"name": "x"}\n') == '{"name": "x"}'


def test_fenced_block_with_prose():
    raw = 'Here is your plan:\n```json\n{"name": "Leg Day"}\n```\nEnjoy!'
    assert extract_json(raw) == '{"name": "Leg Day"}'


def test_fence_without_language_tag():
    assert extract_json('```\n{"a": 1}\n```') == '{"a": 1}'


def test_object_embedded_in_prose():
    raw = 'Sure! {"name": "Core", "exercises": [{"name": "Plank"}]} Let me know.'
    assert extract_json(raw) == '{"name": "Core", "exercises": [{"name": "Plank"}]}'


@pytest.mark.parametrize("raw", ["", "No plan today, sorry.", "} backwards {"])
def test_no_object_raises(raw):
    with pytest.raises(NoJsonFound) as exc_info:
        extract_json(raw)
    assert exc_info.value.kind == "invalid_plan"
