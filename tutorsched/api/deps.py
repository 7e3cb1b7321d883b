from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from tutorsched.core.auth import TokenError, create_access_token, decode_access_token
from tutorsched.core.config import get_settings
from tutorsched.domain import User
from tutorsched.domain.engine import SchedulingEngine

bearer_scheme = HTTPBearer(auto_error=False)


def get_engine(request: Request) -> SchedulingEngine:
    """Return the process-wide scheduling engine created at startup."""
    return request.app.state.engine


def get_now(request: Request) -> datetime:
    """Current local instant; the app clock can be replaced in tests."""
    return request.app.state.clock()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    engine: SchedulingEngine = Depends(get_engine),  # noqa: B008
) -> User:
    """Resolve the authenticated store user from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        claims = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    user = engine.store.find_user(claims.user_id)
    if user is None:
        raise _unauthorized("Unknown user")
    if user.role is not claims.role:
        raise _unauthorized("Role changed, sign in again")
    return user


def require_roles(required_roles: Sequence[str]) -> Callable[[User], User]:
    """Dependency factory enforcing that the authenticated user has one of the required roles."""
    settings = get_settings()
    allowed = set(settings.allowed_roles)

    invalid_roles = [role for role in required_roles if role not in allowed]
    if invalid_roles:
        joined_roles = ", ".join(invalid_roles)
        raise ValueError(f"Unsupported role(s) requested: {joined_roles}")

    required = set(required_roles)

    def dependency(user: User = Depends(get_current_user)) -> User:  # noqa: B008
        if user.role.value not in required:
            raise _forbidden("Insufficient role privileges")
        return user

    return dependency


def issue_token(user: User) -> str:
    return create_access_token(user.id, role=user.role.value, email=user.email)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
