"""
Reporting endpoints: filtered listing, statistics, CSV export, health.

Every report is a projection of one ``list_records`` query; aggregation
happens in Python.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_attendance_manager, get_current_active_user, get_db
from app.models.attendance_record import AttendanceRecord
from app.models.teacher import Teacher
from app.models.user import User
from app.repositories.attendance import RecordFilter, SqlAttendanceRepository
from app.schemas.attendance import (AttendanceRecordRead, HealthResponse,
                                    ReportStatsResponse, StatusResponse)
from app.services.attendance import AttendanceRecordManager
from app.services.reports import count_working_days, iter_csv, summarize

router = APIRouter(tags=["reports"])
logger = logging.getLogger(__name__)


def _record_filter(
    start_date: str | None = Query(default=None, description="YYYY-MM-DD"),
    end_date: str | None = Query(default=None, description="YYYY-MM-DD"),
    teacher_id: int | None = Query(default=None),
    department: str | None = Query(default=None),
    status: str | None = Query(default=None),
) -> RecordFilter:
    return RecordFilter(
        start_date=start_date,
        end_date=end_date,
        teacher_id=teacher_id,
        department=department,
        status=status,
    )


@router.get("/reports", response_model=list[AttendanceRecordRead])
async def list_reports(
    record_filter: RecordFilter = Depends(_record_filter),
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> list[AttendanceRecord]:
    """Attendance records filtered by date range, teacher, department, status."""
    return list(await manager.list_records(record_filter))


@router.get("/reports/stats", response_model=ReportStatsResponse)
async def report_stats(
    record_filter: RecordFilter = Depends(_record_filter),
    db: AsyncSession = Depends(get_db),
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> ReportStatsResponse:
    records = list(await manager.list_records(record_filter))
    stats = summarize(records)

    if record_filter.start_date and record_filter.end_date:
        policy = await SqlAttendanceRepository(db).get_policy()
        stats["working_days"] = count_working_days(
            record_filter.start_date, record_filter.end_date, policy.weekend_days
        )
    return ReportStatsResponse(**stats)


@router.get("/reports/export/csv")
async def export_csv(
    record_filter: RecordFilter = Depends(_record_filter),
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> StreamingResponse:
    """Export the filtered records as a CSV file download."""
    records = list(await manager.list_records(record_filter))
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    logger.info("CSV export of %d records", len(records))
    return StreamingResponse(
        iter_csv(records),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=attendance-{stamp}.csv"},
    )


# ── Health / Status ─────────────────────────────────────────────────
@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check: DB connectivity."""
    result = HealthResponse(db=False)
    try:
        await db.execute(select(1))
        result.db = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
    return result


@router.get("/status", response_model=StatusResponse)
async def system_status(
    db: AsyncSession = Depends(get_db),
    manager: AttendanceRecordManager = Depends(get_attendance_manager),
    _user: User = Depends(get_current_active_user),
) -> StatusResponse:
    """Return current system status: teacher count and today's records."""
    today = await manager.today()
    teacher_count = await db.execute(
        select(func.count(Teacher.id)).where(Teacher.active.is_(True))
    )
    record_count = await db.execute(
        select(func.count(AttendanceRecord.id)).where(AttendanceRecord.date == today)
    )
    return StatusResponse(
        total_teachers=teacher_count.scalar() or 0,
        today_records=record_count.scalar() or 0,
        status="operational",
    )
