"""
Completion call to Gemini in strict-JSON mode, with a single fallback:
if the provider rejects the JSON response mode, retry once without it and
instruct the model in the system prompt to return raw JSON only.
"""
import logging
import re
import time
from dataclasses import dataclass
from typing import Any

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from workout_ai.config import settings
from workout_ai.core.errors import ModelError
from workout_ai.core.metrics import MODEL_LATENCY
from workout_ai.services.gemini_common import run_generate_content

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_ONLY_HIGH,
}

JSON_ONLY_INSTRUCTION = "Return ONLY a valid JSON object. Do not include markdown fences or any commentary."

# Provider error text when the JSON response mode is not supported by the model
JSON_MODE_UNSUPPORTED_PATTERN = re.compile(r"response_(format|mime_type)", re.IGNORECASE)


@dataclass
class CompletionResult:
    text: str
    usage: dict[str, Any] | None = None


def _is_json_mode_unsupported(exc: BaseException) -> bool:
    msg = getattr(exc, "message", None) or str(exc)
    return bool(JSON_MODE_UNSUPPORTED_PATTERN.search(msg))


def _response_text(response) -> str | None:
    if response is None:
        return None
    try:
        return response.text
    except ValueError:
        # Blocked or empty candidate: .text raises instead of returning ""
        return None


def _usage(response) -> dict[str, Any] | None:
    meta = getattr(response, "usage_metadata", None)
    if meta is None:
        return None
    return {
        "prompt_tokens": getattr(meta, "prompt_token_count", None),
        "completion_tokens": getattr(meta, "candidates_token_count", None),
        "total_tokens": getattr(meta, "total_token_count", None),
    }


async def complete(
    system_message: str,
    user_message: str,
    *,
    json_mode: bool,
    max_tokens: int,
    temperature: float,
) -> CompletionResult:
    """One completion call. Raises ModelError on an empty body, ModelTimeoutError on timeout."""
    if not settings.google_gemini_api_key:
        raise ModelError("GOOGLE_GEMINI_API_KEY is not set")
    genai.configure(api_key=settings.google_gemini_api_key)
    generation_config: dict[str, Any] = {
        "temperature": temperature,
        "max_output_tokens": max_tokens,
    }
    if json_mode:
        generation_config["response_mime_type"] = "application/json"
    model = genai.GenerativeModel(
        settings.gemini_model,
        generation_config=generation_config,
        safety_settings=SAFETY_SETTINGS,
        system_instruction=system_message,
    )
    started = time.monotonic()
    try:
        response = await run_generate_content(model, user_message)
    finally:
        MODEL_LATENCY.labels(json_mode=str(json_mode).lower()).observe(time.monotonic() - started)
    text = _response_text(response)
    if not text or not text.strip():
        raise ModelError("Empty model response" + ("" if json_mode else " (fallback)"))
    return CompletionResult(text=text, usage=_usage(response))


async def invoke_model(system_message: str, user_message: str) -> CompletionResult:
    """
    JSON mode first. Only an error mentioning the response format triggers the single
    plain-text retry; everything else (and any failure of the retry) is a ModelError.
    """
    max_tokens = settings.generation_max_output_tokens
    temperature = settings.generation_temperature
    try:
        return await complete(
            system_message,
            user_message,
            json_mode=True,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except ModelError:
        raise
    except Exception as e:
        if not _is_json_mode_unsupported(e):
            raise ModelError(f"Model call failed: {e}") from e
        logger.warning("JSON response mode rejected by %s, retrying without it: %s", settings.gemini_model, e)

    try:
        return await complete(
            f"{system_message}\n\n{JSON_ONLY_INSTRUCTION}",
            user_message,
            json_mode=False,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except ModelError:
        raise
    except Exception as e:
        raise ModelError(f"Model call failed (fallback): {e}") from e
