"""
Per-user throttle for AI plan generation.
One Redis hash per (user, operation) holds last_call_at, window_start and count.
The record is read and rewritten inside a single WATCH/MULTI/EXEC transaction, so two
concurrent requests from the same user can never both pass on a stale counter.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable

from redis.exceptions import RedisError, WatchError

from workout_ai.config import settings
from workout_ai.core.errors import RateLimited

logger = logging.getLogger(__name__)

# Lazy singleton for async Redis client
_redis_client = None

# Optimistic transaction retries before the call is treated as throttled
MAX_TRANSACTION_ATTEMPTS = 32

LOCKOUT_MESSAGE = "Please wait a few seconds before trying again."
HOURLY_CAP_MESSAGE = "Hourly generation limit reached. Try later."
CONTENTION_MESSAGE = "Too many simultaneous requests. Try again in a moment."


def _redis_key(user_id: int, operation: str) -> str:
    return f"rate_limit:{user_id}:{operation}"


def get_redis():
    """Return async Redis client (lazy connect). Returns None if Redis unavailable or disabled."""
    global _redis_client
    if not settings.rate_limit_enabled:
        return None
    if _redis_client is not None:
        return _redis_client
    try:
        from redis.asyncio import from_url
        _redis_client = from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        return _redis_client
    except Exception as e:
        logger.warning("Rate limit: Redis unavailable (%s), skipping generation limit", e)
        return None


async def close_redis() -> None:
    """Close Redis connection (e.g. on app shutdown)."""
    global _redis_client
    if _redis_client is not None:
        try:
            await _redis_client.aclose()
        except Exception as e:
            logger.warning("Rate limit: error closing Redis: %s", e)
        _redis_client = None


def _as_text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


def _parse_record(raw: dict | None) -> dict[str, float]:
    """Decode a Redis hash (str or bytes keys/values) into numeric fields."""
    record: dict[str, float] = {}
    for k, v in (raw or {}).items():
        name = _as_text(k)
        if name in ("last_call_at", "window_start", "count"):
            try:
                record[name] = float(_as_text(v))
            except ValueError:
                continue
    return record


def apply_policy(
    record: dict[str, float],
    now: float,
    *,
    min_interval: float,
    hourly_cap: int,
    window: float,
) -> dict[str, float]:
    """
    Return the updated record for an accepted call, or raise RateLimited.
    Lockout: a call within min_interval of the last accepted call fails.
    Window: once `window` seconds have passed since window_start the count resets.
    """
    last_call_at = record.get("last_call_at")
    if last_call_at is not None and now - last_call_at < min_interval:
        raise RateLimited(
            LOCKOUT_MESSAGE,
            retry_after=math.ceil(min_interval - (now - last_call_at)),
        )

    window_start = record.get("window_start", now)
    count = int(record.get("count", 0))
    if now - window_start >= window:
        window_start = now
        count = 0
    if count >= hourly_cap:
        raise RateLimited(
            HOURLY_CAP_MESSAGE,
            retry_after=math.ceil(window_start + window - now),
        )
    return {"last_call_at": now, "window_start": window_start, "count": count + 1}


async def check_and_record(
    user_id: int,
    operation: str,
    *,
    redis_client=None,
    clock: Callable[[], float] = time.time,
) -> None:
    """
    Accept or reject one generation call for (user_id, operation).
    Raises RateLimited with a retry hint; never retries the caller's request itself.
    On Redis connection errors the call is allowed (fail open) and a warning is logged.
    """
    if not settings.rate_limit_enabled:
        return
    client = redis_client if redis_client is not None else get_redis()
    if client is None:
        return

    key = _redis_key(user_id, operation)
    window = settings.rate_limit_window_seconds
    try:
        for attempt in range(MAX_TRANSACTION_ATTEMPTS):
            async with client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    record = _parse_record(await pipe.hgetall(key))
                    updated = apply_policy(
                        record,
                        clock(),
                        min_interval=settings.rate_limit_min_interval_seconds,
                        hourly_cap=settings.rate_limit_hourly_cap,
                        window=window,
                    )
                    pipe.multi()
                    pipe.hset(
                        key,
                        mapping={
                            "last_call_at": repr(updated["last_call_at"]),
                            "window_start": repr(updated["window_start"]),
                            "count": str(int(updated["count"])),
                            "key": operation,
                        },
                    )
                    pipe.expire(key, int(window * 2))
                    await pipe.execute()
                    return
                except WatchError:
                    logger.debug("Rate limit: concurrent update on %s (attempt %d), retrying", key, attempt + 1)
                    continue
        logger.warning("Rate limit: gave up on %s after %d contended attempts", key, MAX_TRANSACTION_ATTEMPTS)
        raise RateLimited(CONTENTION_MESSAGE, retry_after=1, user_id=user_id)
    except RateLimited as e:
        logger.info("Rate limit: user %s rejected for %s: %s", user_id, operation, e.message)
        raise
    except RedisError as e:
        logger.warning("Rate limit: Redis error in check_and_record: %s", e)
        # On Redis error, allow the request (fail open)
