from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
from jose import JWTError, jwt

from catering.core.config import Settings

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def _normalize_password_for_bcrypt(password: str) -> bytes:
    return (password or "").encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(_normalize_password_for_bcrypt(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_normalize_password_for_bcrypt(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in configuration
        return False


def authenticate_admin(email: str, password: str, settings: Settings) -> bool:
    normalized = (email or "").strip().lower()
    email_matches = hmac.compare_digest(normalized.encode("utf-8"), settings.admin_email.encode("utf-8"))
    password_matches = verify_password(password, settings.admin_password_hash)
    return email_matches and password_matches


def create_admin_token(email: str, settings: Settings, *, now: datetime | None = None) -> str:
    """
    "sub" has to be a string for python-jose; "email" is kept for clients
    reading the token directly.
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(days=settings.jwt_expire_days)
    payload: Dict[str, Any] = {
        "sub": email,
        "email": email,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_admin_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Return the JWT payload or raise ValueError when invalid or expired."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid or expired token") from exc
    if not payload.get("email") and not payload.get("sub"):
        raise ValueError("Invalid token payload")
    return payload
