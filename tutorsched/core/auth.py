from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from tutorsched.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    ADMIN = "admin"
    TUTOR = "tutor"
    STUDENT = "student"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}

    @property
    def can_teach(self) -> bool:
        """Tutors and admins own slots and have students assigned."""
        return self in (Role.ADMIN, Role.TUTOR)


@dataclass(slots=True, frozen=True)
class TokenClaims:
    user_id: str
    role: Role
    email: str | None
    expires_at: datetime


def create_access_token(
    user_id: str,
    *,
    role: str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a session token for a store user."""
    settings = get_settings()
    if role not in settings.allowed_roles or not Role.contains(role):
        raise TokenError(f"Unsupported role: {role}")

    issued = datetime.now(UTC)
    expires = issued + (expires_delta or timedelta(seconds=settings.access_token_ttl_seconds))
    claims = {
        "sub": user_id,
        "role": role,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
        "iss": settings.app_name,
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Validate signature, expiry and issuer, then return the typed claims."""
    settings = get_settings()
    try:
        raw = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "role", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    if not Role.contains(raw["role"]):
        raise TokenError(f"Unsupported role: {raw['role']}")
    return TokenClaims(
        user_id=raw["sub"],
        role=Role(raw["role"]),
        email=raw.get("email"),
        expires_at=datetime.fromtimestamp(raw["exp"], UTC),
    )
