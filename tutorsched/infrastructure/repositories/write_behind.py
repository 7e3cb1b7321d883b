"""
Debounced write-behind persistence.

Mutations stay synchronous and in memory; every event schedules a save that
runs after a quiet period. The document is snapshotted when the save is
scheduled, so later mutations never leak into an earlier write. Saves run
one at a time in the order they were taken. Failed writes are logged and
dropped; the in-memory store stays authoritative for the session.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import structlog
from tutorsched.domain.events import DomainEvent
from tutorsched.infrastructure.repositories.state_repository import StateRepository

logger = structlog.get_logger(__name__)


class WriteBehindPersister:
    def __init__(
        self,
        repository: StateRepository,
        snapshot: Callable[[], dict[str, Any]],
        *,
        delay_seconds: float = 0.2,
    ) -> None:
        self.repository = repository
        self.snapshot = snapshot
        self.delay_seconds = delay_seconds
        self._pending: dict[str, Any] | None = None
        # _timer is only set while the debounce sleep is running; once the
        # sleep ends the task moves to _inflight and is never cancelled.
        self._timer: asyncio.Task[None] | None = None
        self._inflight: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()
        self.writes = 0
        self.failures = 0

    def __call__(self, event: DomainEvent) -> None:
        """Event listener entry point."""
        self.schedule()

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self) -> None:
        """Snapshot now and (re)start the debounce timer."""
        self._pending = self.snapshot()
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller): the snapshot waits for the next flush().
            return
        self._timer = loop.create_task(self._delayed_write())

    async def flush(self) -> None:
        """Write any pending snapshot now, after saves already running."""
        self._cancel_timer()
        await self._write_pending()

    def cancel(self) -> None:
        """Drop the pending snapshot without writing it."""
        self._cancel_timer()
        self._pending = None

    async def close(self) -> None:
        await self.flush()
        inflight, self._inflight = self._inflight, None
        if inflight is not None:
            await inflight

    async def _delayed_write(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        self._timer = None
        self._inflight = asyncio.current_task()
        try:
            await self._write_pending()
        finally:
            if self._inflight is asyncio.current_task():
                self._inflight = None

    async def _write_pending(self) -> None:
        async with self._lock:
            document, self._pending = self._pending, None
            if document is None:
                return
            try:
                revision = await self.repository.save(document)
            except Exception as exc:
                self.failures += 1
                logger.error("state_persist_failed", error=str(exc), exc_info=True)
                return
            self.writes += 1
            logger.debug("state_persisted", revision=revision)

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
