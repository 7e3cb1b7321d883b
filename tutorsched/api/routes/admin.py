"""Admin-only routes: assignments, statistics and maintenance."""

from __future__ import annotations

from datetime import date, datetime

import structlog
from fastapi import APIRouter, Depends, Query
from tutorsched.api.deps import get_engine, get_now, require_roles
from tutorsched.api.schemas.stats import AssignmentsResponse, AssignRequest, StatsResponse
from tutorsched.domain import User
from tutorsched.domain.engine import SchedulingEngine

logger = structlog.get_logger()
router = APIRouter(tags=["Administration"])


@router.get("/assignments", response_model=AssignmentsResponse)
async def list_assignments(
    engine: SchedulingEngine = Depends(get_engine),
    _: User = Depends(require_roles(["admin"])),
) -> AssignmentsResponse:
    return AssignmentsResponse(
        assignments=dict(engine.store.assignments),
        load=engine.assignments.load_by_teacher(),
    )


@router.put("/assignments/{student_id}", response_model=AssignmentsResponse)
async def reassign_student(
    student_id: str,
    payload: AssignRequest,
    engine: SchedulingEngine = Depends(get_engine),
    _: User = Depends(require_roles(["admin"])),
) -> AssignmentsResponse:
    engine.assignments.assign(student_id, payload.teacher_id)
    return AssignmentsResponse(
        assignments=dict(engine.store.assignments),
        load=engine.assignments.load_by_teacher(),
    )


@router.get("/stats/weekly", response_model=StatsResponse)
async def weekly_stats(
    week_start: date | None = Query(None, description="Any date inside the wanted week"),
    engine: SchedulingEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
    _: User = Depends(require_roles(["admin"])),
) -> StatsResponse:
    report = engine.statistics.weekly_stats(
        datetime.combine(week_start, datetime.min.time()) if week_start else now
    )
    return StatsResponse.from_report(report)


@router.get("/stats/all-time", response_model=StatsResponse)
async def all_time_stats(
    engine: SchedulingEngine = Depends(get_engine),
    _: User = Depends(require_roles(["admin"])),
) -> StatsResponse:
    return StatsResponse.from_report(engine.statistics.all_time_stats())


@router.post("/maintenance/weekly-reset")
async def force_weekly_reset(
    engine: SchedulingEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
    admin: User = Depends(require_roles(["admin"])),
) -> dict:
    """Purge all slots right away, regardless of the weekday."""
    purged = engine.weekly_reset.evaluate(now, force=True)
    logger.info("weekly_reset_forced", admin_user=admin.id)
    return {"purged": purged, "at": now.isoformat()}
