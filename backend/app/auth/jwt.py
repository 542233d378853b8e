"""
Access tokens for logged-in accounts.

A token carries the account id as ``sub``, an expiry and a random ``jti``.
Logout revokes a token by blacklisting its ``jti`` until it would have
expired anyway.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from ..config import get_settings


def create_access_token(claims: dict[str, Any], expires_minutes: int | None = None) -> str:
    """Sign ``claims`` plus ``exp`` and ``jti``; lifetime defaults to ACCESS_TOKEN_EXPIRE_MINUTES."""
    settings = get_settings()
    lifetime = timedelta(minutes=expires_minutes or settings.access_token_expire_minutes)
    payload = {
        **claims,
        "exp": datetime.now(timezone.utc) + lifetime,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry.

    Raises:
        ValueError: The token is malformed, forged or expired.
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc


def get_token_expiry(payload: dict[str, Any]) -> datetime | None:
    exp = payload.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)
