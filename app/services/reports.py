"""
Report projections over attendance records: statistics and CSV rows.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator
from datetime import date

from app.core.exceptions import ValidationError
from app.models.attendance_record import (STATUS_ABSENT, STATUS_HALF_DAY,
                                          STATUS_LEAVE, STATUS_PRESENT,
                                          AttendanceRecord)
from app.services.metrics import format_minutes

CSV_HEADER = [
    "Date",
    "Teacher",
    "Department",
    "Subject",
    "Status",
    "Time In",
    "Time Out",
    "Total Hours",
    "Late (min)",
    "Early (min)",
    "Notes",
]

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def count_working_days(start: str, end: str, weekend_days: Iterable[str]) -> int:
    """Count days in [start, end] whose weekday name is not a weekend day."""
    first = date.fromisoformat(start)
    last = date.fromisoformat(end)
    if first > last:
        raise ValidationError("start_date must not be after end_date")

    names = {d.strip().lower() for d in weekend_days}
    weekend = {i for i, name in enumerate(_WEEKDAYS) if name in names}
    full_weeks, rest = divmod((last - first).days + 1, 7)
    offset = first.weekday()
    tail = sum(1 for i in range(rest) if (offset + i) % 7 not in weekend)
    return full_weeks * (7 - len(weekend)) + tail


def summarize(records: list[AttendanceRecord]) -> dict:
    total_days = len(records)
    by_status = {STATUS_PRESENT: 0, STATUS_ABSENT: 0, STATUS_LEAVE: 0, STATUS_HALF_DAY: 0}
    for r in records:
        if r.status in by_status:
            by_status[r.status] += 1

    total_worked = sum(r.total_minutes or 0 for r in records)
    percentage = (by_status[STATUS_PRESENT] / total_days) * 100 if total_days else 0.0
    return {
        "total_days": total_days,
        "present_days": by_status[STATUS_PRESENT],
        "absent_days": by_status[STATUS_ABSENT],
        "leave_days": by_status[STATUS_LEAVE],
        "half_days": by_status[STATUS_HALF_DAY],
        "attendance_percentage": round(percentage, 2),
        "total_late_minutes": sum(r.late_minutes for r in records),
        "total_early_minutes": sum(r.early_minutes for r in records),
        "total_worked_minutes": total_worked,
        "average_worked_minutes": round(total_worked / total_days) if total_days else 0,
    }


def _csv_line(cells: list) -> str:
    buf = io.StringIO()
    csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n").writerow(cells)
    return buf.getvalue()


def iter_csv(records: Iterable[AttendanceRecord]) -> Iterator[str]:
    yield _csv_line(CSV_HEADER)
    for r in records:
        yield _csv_line(
            [
                r.date,
                r.teacher.name,
                r.teacher.department,
                r.teacher.subject,
                r.status,
                r.time_in or "",
                r.time_out or "",
                format_minutes(r.total_minutes) if r.total_minutes else "",
                r.late_minutes,
                r.early_minutes,
                r.notes or "",
            ]
        )
