from __future__ import annotations

import copy
from collections.abc import Iterator
from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient
from tutorsched.core.config import get_settings
from tutorsched.domain.engine import SchedulingEngine
from tutorsched.domain.events import DomainEvent
from tutorsched.domain.seed import create_seed_store
from tutorsched.domain.store import DomainStore

from tests.utils import NOW


@pytest.fixture(scope="session")
def seed_document() -> dict[str, Any]:
    """Seed dataset built once; hashing the demo passwords is not free."""
    return create_seed_store().to_document()


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def store(seed_document: dict[str, Any]) -> DomainStore:
    return DomainStore.from_document(copy.deepcopy(seed_document))


@pytest.fixture()
def engine(store: DomainStore) -> SchedulingEngine:
    return SchedulingEngine(store, get_settings())


@pytest.fixture()
def events(engine: SchedulingEngine) -> list[DomainEvent]:
    """Every event the engine emits during the test."""
    received: list[DomainEvent] = []
    engine.subscribe(received.append)
    return received


@pytest.fixture()
def api_client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    """API client backed by a fresh SQLite file and a fixed clock."""
    from tutorsched.api.main import create_app

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'state.db'}")
    monkeypatch.setenv("PERSIST_DEBOUNCE_SECONDS", "0")
    get_settings.cache_clear()

    app = create_app(clock=lambda: NOW)
    with TestClient(app) as client:
        client.db_path = tmp_path / "state.db"  # type: ignore[attr-defined]
        yield client
    get_settings.cache_clear()
