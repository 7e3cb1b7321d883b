from __future__ import annotations

import asyncio
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from tutorsched.domain.store import DomainStore
from tutorsched.infrastructure.db import Base
from tutorsched.infrastructure.repositories import StateRepository, WriteBehindPersister

from tests.utils import user_named


class FakeRepository:
    def __init__(self, *, fail: bool = False) -> None:
        self.saved: list[dict[str, Any]] = []
        self.fail = fail

    async def save(self, document: dict[str, Any]) -> int:
        if self.fail:
            raise RuntimeError("disk full")
        self.saved.append(document)
        return len(self.saved)


class SlowRepository(FakeRepository):
    async def save(self, document: dict[str, Any]) -> int:
        await asyncio.sleep(0.2)
        return await super().save(document)


class TestWriteBehindPersister:
    @pytest.mark.asyncio
    async def test_burst_of_events_writes_once(self, engine, now) -> None:
        repository = FakeRepository()
        persister = WriteBehindPersister(repository, engine.to_document, delay_seconds=0.01)
        engine.subscribe(persister)
        ivana = user_named(engine, "ivana")

        for hour in (10, 11, 12):
            engine.slots.create_draft_slot(
                ivana.id, now.replace(day=6, hour=hour), actor_id=ivana.id, now=now
            )
        await asyncio.sleep(0.1)

        assert len(repository.saved) == 1
        assert len(repository.saved[0]["slots"]) == 3
        assert persister.writes == 1

    @pytest.mark.asyncio
    async def test_snapshot_is_taken_when_scheduled(self, engine, now) -> None:
        repository = FakeRepository()
        persister = WriteBehindPersister(repository, engine.to_document, delay_seconds=10)
        persister.schedule()

        engine.store.slots.clear()
        engine.store.users.clear()
        await persister.flush()

        assert repository.saved[0]["users"]
        assert not persister.has_pending

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_write(self, engine) -> None:
        repository = FakeRepository()
        persister = WriteBehindPersister(repository, engine.to_document, delay_seconds=10)

        persister.schedule()
        persister.cancel()
        await persister.close()

        assert repository.saved == []

    @pytest.mark.asyncio
    async def test_failures_are_counted_not_raised(self, engine) -> None:
        persister = WriteBehindPersister(
            FakeRepository(fail=True), engine.to_document, delay_seconds=10
        )

        persister.schedule()
        await persister.flush()

        assert persister.failures == 1
        assert persister.writes == 0

    @pytest.mark.asyncio
    async def test_close_waits_for_running_save(self) -> None:
        repository = SlowRepository()
        persister = WriteBehindPersister(repository, lambda: {"v": 1}, delay_seconds=0.01)

        persister.schedule()
        await asyncio.sleep(0.05)
        await persister.close()

        assert repository.saved == [{"v": 1}]
        assert persister.writes == 1

    @pytest.mark.asyncio
    async def test_flush_lands_after_running_save(self) -> None:
        repository = SlowRepository()
        versions = iter([{"v": 1}, {"v": 2}])
        persister = WriteBehindPersister(
            repository, lambda: next(versions), delay_seconds=0.01
        )

        persister.schedule()
        await asyncio.sleep(0.05)
        persister.schedule()
        await persister.flush()

        assert repository.saved == [{"v": 1}, {"v": 2}]
        await persister.close()
        assert persister.writes == 2

    def test_schedule_without_loop_keeps_snapshot(self, engine) -> None:
        persister = WriteBehindPersister(FakeRepository(), engine.to_document)

        persister.schedule()

        assert persister.has_pending


@pytest.mark.asyncio
async def test_state_repository_roundtrip(tmp_path, engine) -> None:
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'state.db'}")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    repository = StateRepository(async_sessionmaker(db_engine, expire_on_commit=False))

    try:
        assert await repository.load() is None
        assert await repository.save(engine.to_document()) == 1
        assert await repository.save(engine.to_document()) == 2

        loaded = await repository.load()
        assert loaded == engine.to_document()
        assert DomainStore.from_document(loaded).to_document() == loaded
    finally:
        await db_engine.dispose()
