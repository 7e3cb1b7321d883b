from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Request
from tutorsched.core.config import get_settings

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


@router.get("/health", summary="Service health probe")
async def health_check(request: Request) -> dict:
    """Return service status and a summary of the in-memory store."""
    settings = get_settings()
    engine = request.app.state.engine
    persister = request.app.state.persister

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if persister.failures == 0 else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "store": {
            "users": len(engine.store.users),
            "slots": len(engine.store.slots),
            "announcements": len(engine.store.announcements),
        },
        "persistence": {
            "writes": persister.writes,
            "failures": persister.failures,
            "pending": persister.has_pending,
        },
    }
    logger.info("health_probe", status=payload["status"])
    return payload
