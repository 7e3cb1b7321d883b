from __future__ import annotations

from datetime import datetime

from fastapi.testclient import TestClient
from tutorsched.domain import Slot, User
from tutorsched.domain.engine import SchedulingEngine

# Wednesday; the week runs Monday 2025-02-03 .. Sunday 2025-02-09.
NOW = datetime(2025, 2, 5, 9, 0)
WEEK_START = datetime(2025, 2, 3)


def user_named(engine: SchedulingEngine, username: str) -> User:
    return engine.users.find_user_by_identifier(username)


def published_slot(
    engine: SchedulingEngine, tutor: User, when: datetime, *, now: datetime
) -> Slot:
    """Create a draft for ``tutor`` and publish its week."""
    slot = engine.slots.create_draft_slot(tutor.id, when, actor_id=tutor.id, now=now)
    engine.slots.publish_drafts_for_week(tutor.id, when, actor_id=tutor.id, now=now)
    return slot


def login_headers(client: TestClient, identifier: str, password: str = "test123") -> dict[str, str]:
    response = client.post(
        "/auth/login", json={"identifier": identifier, "password": password}
    )
    assert response.status_code == 200, response.text
    token = response.json()["tokens"]["access_token"]
    return {"Authorization": f"Bearer {token}"}
