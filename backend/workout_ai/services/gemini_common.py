"""
Shared helpers for Gemini: run blocking generate_content in threadpool to avoid blocking the event loop.
Bounded by a timeout; no automatic retries (the caller decides whether to resubmit).
"""
from __future__ import annotations

import asyncio
import logging

from starlette.concurrency import run_in_threadpool

from workout_ai.config import settings
from workout_ai.core.errors import ModelTimeoutError

logger = logging.getLogger(__name__)


async def run_generate_content(model, contents):
    """Run model.generate_content(contents) in a thread pool; raise ModelTimeoutError past the timeout."""
    timeout = settings.gemini_request_timeout_seconds or 90

    def _call():
        return model.generate_content(contents)

    try:
        return await asyncio.wait_for(run_in_threadpool(_call), timeout=float(timeout))
    except asyncio.TimeoutError as e:
        logger.warning("Gemini request timed out after %ss", timeout)
        raise ModelTimeoutError(f"Gemini request timed out after {timeout}s") from e
