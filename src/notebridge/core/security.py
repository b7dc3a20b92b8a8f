"""
Password hashing, access JWTs and opaque refresh tokens.

Access tokens are short-lived HS256 JWTs carrying ``sub``, ``email`` and
``role``. Refresh tokens are random opaque strings; only their SHA-256
hash is persisted, so a leaked ``sessions`` table cannot be replayed.

Tags:
    notebridge, core, security, jwt, bcrypt, refresh-tokens

Doc-Types:
    api-reference
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

import bcrypt
import jwt

from notebridge.core.errors import AuthenticationError
from notebridge.core.settings import NotebridgeSettings
from notebridge.core.time import utc_now, utc_now_naive

REFRESH_TOKEN_BYTES = 48


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """Decoded access-token payload."""

    user_id: str
    email: str
    role: str


# ── Passwords ────────────────────────────────────────────────────────────


def _password_bytes(plain: str) -> bytes:
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input
    return plain.encode("utf-8")[:72]


def hash_password(plain: str, *, rounds: int = 12) -> str:
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


# ── Access tokens ────────────────────────────────────────────────────────


def create_access_token(
    settings: NotebridgeSettings, *, user_id: str, email: str, role: str
) -> str:
    now = utc_now()
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_access_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: NotebridgeSettings, token: str) -> AccessClaims:
    """Verify signature and expiry, raising ``AuthenticationError`` otherwise."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_access_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Access token expired", cause=exc) from exc
    except jwt.PyJWTError as exc:
        raise AuthenticationError("Invalid access token", cause=exc) from exc

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise AuthenticationError("Invalid access token")
    return AccessClaims(
        user_id=sub,
        email=str(payload.get("email", "")),
        role=str(payload.get("role", "")),
    )


# ── Refresh tokens ───────────────────────────────────────────────────────


def generate_refresh_token() -> str:
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_token_expiry(settings: NotebridgeSettings) -> datetime:
    """Naive UTC expiry for a refresh token issued now."""
    return utc_now_naive() + timedelta(days=settings.refresh_token_ttl_days)
