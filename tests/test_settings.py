"""Tests for the school policy endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_defaults_created_on_first_read(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/settings")
    assert resp.status_code == 200
    assert resp.json() == {
        "start_time": "09:00",
        "end_time": "17:00",
        "grace_minutes": 15,
        "half_day_minutes": 240,
        "weekend_days": "Saturday,Sunday",
        "timezone": "UTC",
    }


@pytest.mark.asyncio
async def test_partial_update(async_client: AsyncClient):
    resp = await async_client.put(
        "/api/v1/settings",
        json={"start_time": "08:30", "grace_minutes": 10, "weekend_days": "friday, saturday"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["start_time"] == "08:30"
    assert data["grace_minutes"] == 10
    assert data["end_time"] == "17:00"
    assert data["weekend_days"] == "Friday,Saturday"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"start_time": "8:30"},
        {"end_time": "25:00"},
        {"grace_minutes": -1},
        {"half_day_minutes": -5},
        {"weekend_days": "Caturday"},
        {"timezone": "Mars/Olympus"},
    ],
)
async def test_invalid_update_rejected(async_client: AsyncClient, payload):
    resp = await async_client.put("/api/v1/settings", json=payload)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_new_policy_applies_to_next_mark(async_client: AsyncClient):
    teacher = await async_client.post(
        "/api/v1/teachers", json={"name": "T", "department": "D", "subject": "S"}
    )
    tid = teacher.json()["id"]
    await async_client.put("/api/v1/settings", json={"start_time": "08:00", "grace_minutes": 5})
    resp = await async_client.post(
        "/api/v1/attendance/mark",
        json={"teacher_id": tid, "date": "2026-03-02", "status": "PRESENT", "time_in": "08:20"},
    )
    assert resp.status_code == 200
    assert resp.json()["late_minutes"] == 15
