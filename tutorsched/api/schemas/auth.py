"""Pydantic schemas for authentication and user endpoints."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field
from tutorsched.core.auth import Role
from tutorsched.domain import User

# --- Request Schemas ---


class LoginRequest(BaseModel):
    """Login with either an email address or a username."""

    identifier: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., description="User password")


class CreateUserRequest(BaseModel):
    """Admin request to add a tutor or student."""

    role: Role = Field(default=Role.STUDENT)
    name: str = Field(..., min_length=1, max_length=128)
    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


# --- Response Schemas ---


class UserResponse(BaseModel):
    id: str
    role: str
    name: str
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            role=user.role.value,
            name=user.name,
            username=user.username,
            email=user.email,
        )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginResponse(BaseModel):
    message: str
    user: UserResponse
    tokens: TokenResponse


class MeResponse(BaseModel):
    user: UserResponse
    tutor_id: str | None = None
    unread_notifications: int = 0


class UsersResponse(BaseModel):
    users: list[UserResponse]
