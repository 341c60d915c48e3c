"""Pull a JSON object out of model text that may be fenced or wrapped in prose."""

import re

from workout_ai.core.errors import NoJsonFound

FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def extract_json(raw_text: str) -> str:
    """
    In order: the whole trimmed text if it is a bare object; the first fenced block;
    the span from the first "{" to the last "}". Raises NoJsonFound otherwise.
    """
    trimmed = (raw_text or "").strip()
    if trimmed.startswith("{") and trimmed.endswith("}"):
        return trimmed
    fence = FENCE_PATTERN.search(trimmed)
    if fence and fence.group(1):
        return fence.group(1)
    first = trimmed.find("{")
    last = trimmed.rfind("}")
    if first != -1 and last != -1 and last > first:
        return trimmed[first:last + 1]
    raise NoJsonFound("No JSON object found in model output.")
