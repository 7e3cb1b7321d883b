"""User lookup, credential checks and admin-driven user creation."""

from __future__ import annotations

import hmac

import structlog
from passlib.context import CryptContext
from tutorsched.core.auth import Role
from tutorsched.core.errors import (
    DuplicateEmail,
    DuplicateUsername,
    Forbidden,
    InvalidCredentials,
    InvalidRole,
    UserNotFound,
    ValidationError,
)
from tutorsched.domain.events import EventBus, EventType
from tutorsched.domain.models import User, new_id
from tutorsched.domain.services.assignments import AssignmentService
from tutorsched.domain.store import DomainStore

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, stored_secret: str) -> bool:
    """Check a password against a stored hash.

    Documents written before hashing was introduced hold the plain secret;
    those are compared directly.
    """
    if not stored_secret:
        return False
    if pwd_context.identify(stored_secret) is None:
        return hmac.compare_digest(plain_password.encode(), stored_secret.encode())
    return pwd_context.verify(plain_password, stored_secret)


class UserService:
    """Service for login lookups and user management."""

    def __init__(
        self, store: DomainStore, bus: EventBus, assignments: AssignmentService
    ) -> None:
        self.store = store
        self.bus = bus
        self.assignments = assignments

    def find_user_by_identifier(self, identifier: str) -> User:
        """Match an email or username, case-insensitively."""
        needle = identifier.strip().lower()
        for user in self.store.users:
            if needle and needle in (user.email.lower(), user.username.lower()):
                return user
        raise UserNotFound(f"User {identifier} not found")

    def verify_credential(self, user: User, password: str) -> bool:
        return verify_password(password, user.password)

    def login(self, identifier: str, password: str) -> User:
        try:
            user = self.find_user_by_identifier(identifier)
        except UserNotFound:
            logger.warning("login_user_not_found", identifier=identifier)
            raise
        if not self.verify_credential(user, password):
            logger.warning("login_invalid_password", user_id=user.id)
            raise InvalidCredentials("Invalid password")
        logger.info("login_success", user_id=user.id, role=user.role.value)
        return user

    def create_user(
        self,
        *,
        actor_id: str,
        role: str,
        name: str,
        username: str,
        email: str,
        password: str,
    ) -> User:
        """Create a user (admin only); new students are auto-assigned a tutor."""
        actor = self.store.get_user(actor_id)
        if actor.role is not Role.ADMIN:
            raise Forbidden("Only admins can create users")

        try:
            user_role = Role(role)
        except ValueError as exc:
            raise InvalidRole(f"Invalid role: {role}") from exc

        if not username.strip() or not email.strip():
            raise ValidationError("Username and email are required")
        if any(u.username.lower() == username.strip().lower() for u in self.store.users):
            raise DuplicateUsername(f"Username {username} is taken")
        if any(u.email.lower() == email.strip().lower() for u in self.store.users):
            raise DuplicateEmail(f"Email {email} is taken")

        user = User(
            id=new_id(),
            role=user_role,
            name=name.strip() or username.strip(),
            username=username.strip(),
            email=email.strip(),
            password=hash_password(password),
        )
        self.store.users.append(user)

        logger.info("user_created", user_id=user.id, role=user.role.value, actor_id=actor.id)
        self.bus.emit(EventType.USER_NEW, user_id=user.id, role=user.role.value)

        if user.role is Role.STUDENT:
            self.assignments.auto_assign_new_student(user.id)
        return user
