"""Explicit fallback chains instead of ad hoc per-field defaulting."""

from typing import TypeVar

T = TypeVar("T")


def resolve(primary: T | None, fallback: T | None = None, default: T | None = None) -> T | None:
    """
    Return primary if it is not None, else fallback if it is not None, else default.
    Only None counts as missing: 0, "" and [] are real values.
    """
    if primary is not None:
        return primary
    if fallback is not None:
        return fallback
    return default
