"""Tests for the attendance metrics calculator."""

import pytest

from app.core.exceptions import ValidationError
from app.services.metrics import (AttendanceMetrics, Policy, calculate_metrics,
                                  format_minutes, minutes_of)

POLICY = Policy(start_time="09:00", end_time="17:00", grace_minutes=15)


def test_no_check_in_yields_empty_metrics():
    assert calculate_metrics(None, None, POLICY) == AttendanceMetrics(0, 0, None)
    assert calculate_metrics("", "17:00", POLICY) == AttendanceMetrics(0, 0, None)


@pytest.mark.parametrize("time_in", ["08:30", "09:00", "09:10", "09:15"])
def test_check_in_within_grace_is_not_late(time_in):
    assert calculate_metrics(time_in, None, POLICY).late_minutes == 0


@pytest.mark.parametrize("time_in,expected", [("09:16", 1), ("09:20", 5), ("10:15", 60)])
def test_late_minutes_exclude_grace(time_in, expected):
    assert calculate_metrics(time_in, None, POLICY).late_minutes == expected


def test_early_departure():
    assert calculate_metrics("09:00", "16:30", POLICY).early_minutes == 30


@pytest.mark.parametrize("time_out", ["17:00", "17:05", "19:00"])
def test_leaving_at_or_after_end_is_not_early(time_out):
    assert calculate_metrics("09:00", time_out, POLICY).early_minutes == 0


def test_total_minutes_full_day():
    metrics = calculate_metrics("09:00", "17:00", POLICY)
    assert metrics == AttendanceMetrics(late_minutes=0, early_minutes=0, total_minutes=480)


def test_open_day_has_no_total_and_no_early():
    metrics = calculate_metrics("09:40", None, POLICY)
    assert metrics.total_minutes is None
    assert metrics.early_minutes == 0
    assert metrics.late_minutes == 25


def test_time_out_before_time_in_passes_through():
    assert calculate_metrics("12:00", "11:30", POLICY).total_minutes == -30


def test_zero_grace_policy():
    strict = Policy(start_time="08:00", end_time="15:00", grace_minutes=0)
    assert calculate_metrics("08:00", None, strict).late_minutes == 0
    assert calculate_metrics("08:01", None, strict).late_minutes == 1


def test_half_day_threshold_does_not_change_metrics():
    short = Policy(half_day_minutes=10)
    long = Policy(half_day_minutes=600)
    assert calculate_metrics("09:30", "12:00", short) == calculate_metrics("09:30", "12:00", long)


def test_calculator_is_idempotent():
    first = calculate_metrics("09:20", "16:45", POLICY)
    second = calculate_metrics("09:20", "16:45", POLICY)
    assert first == second == AttendanceMetrics(5, 15, 445)


@pytest.mark.parametrize("bad", ["9:00", "24:00", "09:60", "0900", "nine", "09:00:00"])
def test_malformed_time_rejected(bad):
    with pytest.raises(ValidationError):
        minutes_of(bad)
    with pytest.raises(ValidationError):
        calculate_metrics(bad, None, POLICY)


def test_minutes_of():
    assert minutes_of("00:00") == 0
    assert minutes_of("23:59") == 1439


def test_format_minutes():
    assert format_minutes(None) == "0h 0m"
    assert format_minutes(480) == "8h 0m"
    assert format_minutes(445) == "7h 25m"
