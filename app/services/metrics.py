"""
Attendance metrics: late, early-departure and worked minutes for one day.

Times are wall-clock ``HH:mm`` strings compared as minutes since midnight,
so a shift never crosses midnight.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from app.core.exceptions import ValidationError
from app.models.school_settings import (DEFAULT_END_TIME, DEFAULT_GRACE_MINUTES,
                                        DEFAULT_HALF_DAY_MINUTES,
                                        DEFAULT_START_TIME, DEFAULT_TIMEZONE,
                                        DEFAULT_WEEKEND_DAYS)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class Policy:
    """School-hours policy in effect for a single write."""

    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME
    grace_minutes: int = DEFAULT_GRACE_MINUTES
    half_day_minutes: int = DEFAULT_HALF_DAY_MINUTES
    weekend_days: tuple[str, ...] = field(
        default_factory=lambda: tuple(DEFAULT_WEEKEND_DAYS.split(","))
    )
    timezone: str = DEFAULT_TIMEZONE


@dataclass(frozen=True)
class AttendanceMetrics:
    late_minutes: int = 0
    early_minutes: int = 0
    total_minutes: int | None = None


def minutes_of(value: str) -> int:
    """Parse ``HH:mm`` into minutes since midnight."""
    match = _TIME_RE.match(value or "")
    if match is None:
        raise ValidationError(f"Time must be HH:mm (24-hour), got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def calculate_metrics(
    time_in: str | None,
    time_out: str | None,
    policy: Policy,
) -> AttendanceMetrics:
    """Derive late / early / total minutes from check-in and check-out.

    A check-in at exactly ``start_time + grace_minutes`` is on time.  A
    ``time_out`` earlier than ``time_in`` yields a negative total; callers
    that care reject it before persisting.
    """
    if not time_in:
        return AttendanceMetrics()

    late_diff = minutes_of(time_in) - minutes_of(policy.start_time)
    late_minutes = late_diff - policy.grace_minutes if late_diff > policy.grace_minutes else 0

    if not time_out:
        return AttendanceMetrics(late_minutes=late_minutes)

    out_minutes = minutes_of(time_out)
    early_diff = minutes_of(policy.end_time) - out_minutes
    return AttendanceMetrics(
        late_minutes=late_minutes,
        early_minutes=early_diff if early_diff > 0 else 0,
        total_minutes=out_minutes - minutes_of(time_in),
    )


def format_minutes(minutes: int | None) -> str:
    """Render a minute count as ``Xh Ym`` for reports."""
    if not minutes:
        return "0h 0m"
    return f"{minutes // 60}h {minutes % 60}m"
