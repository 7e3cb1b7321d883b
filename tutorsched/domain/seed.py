"""Demo dataset used when no persisted document exists yet."""

from __future__ import annotations

from tutorsched.core.auth import Role
from tutorsched.domain.models import User, new_id
from tutorsched.domain.services.users import hash_password
from tutorsched.domain.store import DomainStore

SEED_USERS: tuple[dict[str, str], ...] = (
    {"role": "admin", "name": "Admin", "username": "admin", "email": "admin@uni.hr", "password": "admin123"},
    {"role": "tutor", "name": "Ivana Tutor", "username": "ivana", "email": "ivana@uni.hr", "password": "test123"},
    {"role": "tutor", "name": "Marko Mentor", "username": "marko", "email": "marko@uni.hr", "password": "test123"},
    {"role": "student", "name": "Ana Student", "username": "ana", "email": "ana@uni.hr", "password": "test123"},
    {"role": "student", "name": "Petar Polaznik", "username": "petar", "email": "petar@uni.hr", "password": "test123"},
)


def create_seed_store() -> DomainStore:
    """Build the initial store: seed users with students spread over tutors."""
    users = [
        User(
            id=new_id(),
            role=Role(raw["role"]),
            name=raw["name"],
            username=raw["username"],
            email=raw["email"],
            password=hash_password(raw["password"]),
        )
        for raw in SEED_USERS
    ]

    tutors = [user for user in users if user.role is Role.TUTOR]
    students = [user for user in users if user.role is Role.STUDENT]
    assignments = {
        student.id: tutors[index % len(tutors)].id for index, student in enumerate(students)
    }
    return DomainStore(users=users, assignments=assignments)
