"""
Token and password helpers for the bearer session context.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from werkzeug.security import generate_password_hash, check_password_hash

from timekeeper.core.config import settings
from timekeeper.core.exceptions import InvalidTokenError


def get_password_hash(password: str) -> str:
    return generate_password_hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, plain_password)


def _create_token(data: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    payload = data.copy()
    now = datetime.now(timezone.utc)
    payload.update({"type": token_type, "iat": now, "exp": now + expires_delta})
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        data,
        "access",
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(data: Dict[str, Any]) -> str:
    return _create_token(data, "refresh", timedelta(days=settings.refresh_token_expire_days))


def verify_token(token: str, token_type: str = "access") -> Dict[str, Any]:
    """Decode a token and check its type; raises InvalidTokenError otherwise."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token expired")
    except jwt.PyJWTError:
        raise InvalidTokenError()

    if payload.get("type") != token_type:
        raise InvalidTokenError(f"Expected {token_type} token")
    return payload


def get_user_id_from_token(token: str) -> str:
    payload = verify_token(token, "access")
    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError("Token has no subject")
    return user_id
