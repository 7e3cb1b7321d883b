from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tutorsched.infrastructure.db.models import DEFAULT_STATE_KEY, EngineStateModel

logger = structlog.get_logger(__name__)


class StateRepository:
    """Loads and stores the serialized scheduler document."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        key: str = DEFAULT_STATE_KEY,
    ) -> None:
        self.session_factory = session_factory
        self.key = key

    async def load(self) -> dict[str, Any] | None:
        async with self.session_factory() as session:
            stmt = select(EngineStateModel).where(EngineStateModel.key == self.key)
            row = await session.scalar(stmt)
            if row is None:
                logger.info("state_document_missing", key=self.key)
                return None
            logger.info("state_document_loaded", key=self.key, revision=row.revision)
            return dict(row.document)

    async def save(self, document: dict[str, Any]) -> int:
        """Upsert the document and return its new revision number."""
        async with self.session_factory() as session:
            row = await session.get(EngineStateModel, self.key)
            if row is None:
                row = EngineStateModel(key=self.key, document=document, revision=1)
                session.add(row)
            else:
                row.document = document
                row.revision += 1
            await session.commit()
            logger.debug("state_document_saved", key=self.key, revision=row.revision)
            return row.revision
