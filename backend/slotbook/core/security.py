from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

from jose import JWTError, jwt

from slotbook.core.config import settings


def create_token(
    subject: str | Any,
    expires_delta: timedelta,
    token_type: str,
    claims: Mapping[str, Any] | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = dict(claims or {})
    payload.update(
        {
            "exp": now + expires_delta,
            "iat": now,
            "sub": str(subject),
            "type": token_type,
        }
    )
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    subject: str | Any, claims: Mapping[str, Any] | None = None
) -> str:
    """Issue an access token carrying the caller's rank claims."""
    return create_token(
        subject,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "access",
        claims,
    )


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
        if payload.get("type") != token_type:
            raise JWTError("Invalid token type")
        return payload
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
