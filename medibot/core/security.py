"""Password hashing and the three JWT kinds MediBot issues.

Every token carries a ``type`` claim (access, refresh or password_reset) and a
random ``jti``. Access and refresh jtis are recorded on the ``UserSession`` so
a session can be revoked server-side before its tokens expire.
"""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from medibot.core.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
    PASSWORD_RESET = "password_reset"


def hash_password(password: str) -> str:
    if not password or not isinstance(password, str):
        raise ValueError("Password must be a non-empty string")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password or not isinstance(plain_password, str):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # malformed or foreign hash
        return False


def hash_token(token: str) -> str:
    """Refresh tokens are stored only as their SHA-256 digest."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _issue(user_id: int, token_type: TokenType, expires_delta: timedelta, **claims) -> tuple[str, str]:
    jti = secrets.token_urlsafe(32)
    payload = {
        "sub": str(user_id),
        "type": token_type.value,
        "jti": jti,
        "exp": datetime.now(timezone.utc) + expires_delta,
        **claims,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM), jti


def create_access_token(
    user_id: int,
    email: str,
    role: Optional[str],
    expires_delta: Optional[timedelta] = None,
) -> tuple[str, str]:
    # The role claim is informational; authorisation reads the role from the user row.
    return _issue(
        user_id,
        TokenType.ACCESS,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        email=email,
        role=role,
    )


def create_refresh_token(user_id: int) -> tuple[str, str]:
    return _issue(user_id, TokenType.REFRESH, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def create_password_reset_token(user_id: int, expires_minutes: Optional[int] = None) -> tuple[str, str]:
    minutes = expires_minutes or settings.PASSWORD_RESET_EXPIRE_MINUTES
    return _issue(user_id, TokenType.PASSWORD_RESET, timedelta(minutes=minutes))


def decode_token(token: str, expected: TokenType = TokenType.ACCESS) -> Optional[Dict[str, Any]]:
    """Verified claims of ``token``, or None when invalid, expired or of another type."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != expected.value:
        return None
    return payload
