"""JWT creation/verification. Sign-up and login live in the account service; this side only verifies."""

from datetime import datetime, timezone, timedelta
from typing import Any

from jose import jwt

from workout_ai.config import settings


def create_access_token(user_id: int, email: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": str(user_id), "email": email, "exp": expire}
    result = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return result if isinstance(result, str) else result.decode("utf-8")


def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
