"""FastAPI dependencies: current user from JWT, Redis client for generation throttling."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from workout_ai.core.auth import decode_token
from workout_ai.core.rate_limit import get_redis
from workout_ai.db import get_db
from workout_ai.models.user import User


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def _bearer_token(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise _unauthorized("Not authenticated")
    return token.strip()


async def get_current_user(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Resolve the Bearer token's subject to a User. Accounts are created by the account service."""
    try:
        payload = decode_token(_bearer_token(request))
        user_id = int(payload["sub"])
    except JWTError:
        raise _unauthorized("Invalid or expired token")
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Invalid token")
    user = await session.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_rate_limit_redis():
    """Redis client for the generation throttle, or None when limiting is disabled/unavailable."""
    return get_redis()
