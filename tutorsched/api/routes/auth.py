"""Authentication routes - login, profile, admin user creation."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from tutorsched.api.deps import get_current_user, get_engine, issue_token, require_roles
from tutorsched.api.schemas.auth import (
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    TokenResponse,
    UserResponse,
    UsersResponse,
)
from tutorsched.core.config import get_settings
from tutorsched.domain import User
from tutorsched.domain.engine import SchedulingEngine

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User login",
    description="Authenticate with email or username and password, returns a JWT.",
)
async def login(
    payload: LoginRequest,
    engine: SchedulingEngine = Depends(get_engine),
) -> LoginResponse:
    user = engine.users.login(payload.identifier, payload.password)
    settings = get_settings()
    return LoginResponse(
        message="Login successful",
        user=UserResponse.from_user(user),
        tokens=TokenResponse(
            access_token=issue_token(user),
            expires_in=settings.access_token_ttl_seconds,
        ),
    )


@router.get("/me", response_model=MeResponse, summary="Get current user")
async def get_me(
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> MeResponse:
    return MeResponse(
        user=UserResponse.from_user(user),
        tutor_id=engine.assignments.tutor_of(user.id),
        unread_notifications=engine.notifications.unread_count(user.id),
    )


@router.get("/users", response_model=UsersResponse, summary="List users (admin)")
async def list_users(
    engine: SchedulingEngine = Depends(get_engine),
    _: User = Depends(require_roles(["admin"])),
) -> UsersResponse:
    return UsersResponse(users=[UserResponse.from_user(u) for u in engine.store.users])


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user (admin)",
)
async def create_user(
    payload: CreateUserRequest,
    engine: SchedulingEngine = Depends(get_engine),
    admin: User = Depends(require_roles(["admin"])),
) -> UserResponse:
    user = engine.users.create_user(
        actor_id=admin.id,
        role=payload.role.value,
        name=payload.name,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    return UserResponse.from_user(user)
