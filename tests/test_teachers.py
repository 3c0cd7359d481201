"""Tests for teacher CRUD endpoints."""

import pytest
from httpx import AsyncClient

TEACHER = {"name": "Grace Hopper", "department": "Science", "subject": "Computing"}


@pytest.mark.asyncio
async def test_create_teacher(async_client: AsyncClient):
    """POST /teachers should create an active teacher."""
    resp = await async_client.post("/api/v1/teachers", json=TEACHER)
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Grace Hopper"
    assert data["department"] == "Science"
    assert data["active"] is True
    assert data["id"] is not None


@pytest.mark.asyncio
async def test_create_teacher_requires_fields(async_client: AsyncClient):
    """Missing or blank department/subject is a 400 validation failure."""
    resp = await async_client.post("/api/v1/teachers", json={"name": "X", "department": " ", "subject": "Y"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    resp = await async_client.post("/api/v1/teachers", json={"name": "X"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_teachers_sorted_and_filtered(async_client: AsyncClient):
    await async_client.post("/api/v1/teachers", json={**TEACHER, "name": "Zed"})
    await async_client.post("/api/v1/teachers", json={**TEACHER, "name": "Amy", "department": "Arts"})
    resp = await async_client.get("/api/v1/teachers")
    assert resp.status_code == 200
    assert [t["name"] for t in resp.json()] == ["Amy", "Zed"]

    resp = await async_client.get("/api/v1/teachers", params={"department": "Arts"})
    assert [t["name"] for t in resp.json()] == ["Amy"]

    resp = await async_client.get("/api/v1/teachers", params={"search": "ze"})
    assert [t["name"] for t in resp.json()] == ["Zed"]


@pytest.mark.asyncio
async def test_get_teacher_not_found(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/teachers/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_teacher(async_client: AsyncClient):
    create = await async_client.post("/api/v1/teachers", json=TEACHER)
    tid = create.json()["id"]
    resp = await async_client.put(f"/api/v1/teachers/{tid}", json={"subject": "Physics"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["subject"] == "Physics"
    assert data["name"] == "Grace Hopper"


@pytest.mark.asyncio
async def test_delete_teacher_is_soft(async_client: AsyncClient):
    """DELETE /teachers/{id} deactivates; the row is still readable."""
    create = await async_client.post("/api/v1/teachers", json=TEACHER)
    tid = create.json()["id"]
    resp = await async_client.delete(f"/api/v1/teachers/{tid}")
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    listed = await async_client.get("/api/v1/teachers")
    assert tid not in [t["id"] for t in listed.json()]

    still_there = await async_client.get(f"/api/v1/teachers/{tid}")
    assert still_there.status_code == 200
    assert still_there.json()["active"] is False
