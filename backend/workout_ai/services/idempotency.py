"""
Dedupe keys for generated plans. Callers look plans up by key to recognize a repeated,
semantically identical request; nothing here prevents the insert itself.
"""

import hashlib
import json
from typing import Any


def digest(value: Any) -> str:
    """SHA-256 hex of a compact JSON serialization (field order as given, lists not re-sorted)."""
    payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def derive_key(
    user_id: int,
    workout_type: str,
    minutes: int,
    level: int,
    equipment: list[str],
    profile_digest: str | None,
    explicit_key: str | None = None,
) -> str:
    if explicit_key is not None:
        return explicit_key
    return digest([user_id, workout_type, minutes, level, list(equipment), profile_digest])


def derive_adaptive_key(user_id: int, adapted_from: int, level: int, equipment: list[str]) -> str:
    return digest([user_id, "adaptive", adapted_from, level, list(equipment)])
