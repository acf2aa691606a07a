from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=settings.PASSWORD_HASH_ROUNDS,
    pbkdf2_sha256__salt_size=16,
)

SESSION_TTL = timedelta(hours=settings.SESSION_TTL_HOURS)
JWT_TTL = timedelta(hours=24)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the database columns store time."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def get_session_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + SESSION_TTL


def generate_jwt(user: Any, secret: str = settings.SECRET_KEY, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or JWT_TTL)
    payload = {
        "userId": user.id,
        "username": user.username,
        "email": user.email,
        "iss": settings.JWT_ISSUER,
        "exp": expire,
    }
    return jwt.encode(payload, secret, algorithm=settings.ALGORITHM)


def verify_jwt(token: str, secret: str = settings.SECRET_KEY) -> Optional[dict]:
    """Decoded claims, or None for a bad signature, malformed token or expired ``exp``."""
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[settings.ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
    except (JWTError, AttributeError, TypeError, ValueError):
        return None


def extract_token_from_cookie(cookie_header: Optional[str], name: str = settings.SESSION_COOKIE_NAME) -> Optional[str]:
    if not cookie_header:
        return None
    for part in cookie_header.split(";"):
        key, sep, value = part.strip().partition("=")
        if sep and key == name:
            return value or None
    return None


def create_secure_cookie(name: str, value: str, max_age: int = 86400) -> str:
    return f"{name}={value}; HttpOnly; Secure; SameSite=Strict; Max-Age={max_age}; Path=/"


def clear_cookie(name: str) -> str:
    return f"{name}=; HttpOnly; Secure; SameSite=Strict; Max-Age=0; Path=/"
