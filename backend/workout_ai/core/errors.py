"""
Typed failures of the generation pipeline. Every kind is terminal for the request;
main.py maps them to HTTP responses {"detail": public_message, "kind": kind}.
"""

from __future__ import annotations

from typing import Any


class GenerationError(Exception):
    kind = "generation_failed"
    status_code = 500
    public_message = "Workout generation failed. Please try again later."

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.public_message
        self.context = context
        super().__init__(self.message)

    @property
    def detail(self) -> str:
        """Text safe to show to the caller."""
        return self.public_message

    def headers(self) -> dict[str, str] | None:
        return None


class RateLimited(GenerationError):
    kind = "rate_limited"
    status_code = 429

    def __init__(self, message: str, retry_after: int = 1, **context: Any) -> None:
        super().__init__(message, **context)
        self.retry_after = max(1, int(retry_after))

    @property
    def detail(self) -> str:
        return self.message

    def headers(self) -> dict[str, str]:
        return {"Retry-After": str(self.retry_after)}


class ProfileMissing(GenerationError):
    kind = "profile_missing"
    status_code = 412
    public_message = "Profile not found. Complete onboarding."


class PlanNotFound(GenerationError):
    kind = "plan_not_found"
    status_code = 404
    public_message = "Previous workout not found."


class PermissionDenied(GenerationError):
    kind = "permission_denied"
    status_code = 403
    public_message = "Not your workout."


class ModelError(GenerationError):
    """Provider failure, empty body, or a second failure after the JSON-mode fallback."""

    kind = "model_error"
    status_code = 502


class ModelTimeoutError(ModelError):
    kind = "model_timeout"
    status_code = 504
    public_message = "Workout generation timed out. Please try again later."


class NoJsonFound(GenerationError):
    kind = "invalid_plan"
    status_code = 502
    public_message = "Model returned an invalid plan."


class InvalidPlanSchema(GenerationError):
    kind = "invalid_plan"
    status_code = 502
    public_message = "Model returned an invalid plan."

    def __init__(self, message: str | None = None, issues: list[dict] | None = None, **context: Any) -> None:
        super().__init__(message, **context)
        self.issues = issues or []
