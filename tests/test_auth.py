"""Tests for PIN login, tokens and role guards."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, decode_access_token, get_pin_hash
from app.models.teacher import Teacher
from app.models.user import ROLE_ADMIN, ROLE_TEACHER, User


async def _user(db_session: AsyncSession, role: str = ROLE_TEACHER, pin: str = "2468") -> User:
    user = User(
        name="Pat",
        phone_or_email=f"{role.lower()}@school.com",
        pin_hash=get_pin_hash(pin),
        role=role,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.mark.asyncio
async def test_login_sets_httponly_cookies(anon_client: AsyncClient, db_session: AsyncSession):
    user = await _user(db_session)
    resp = await anon_client.post(
        "/api/v1/auth/login", json={"phone_or_email": " Teacher@School.com ", "pin": "2468"}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    payload = decode_access_token(data["access_token"])
    assert payload["sub"] == str(user.id)
    assert payload["role"] == ROLE_TEACHER

    set_cookie = resp.headers.get("set-cookie")
    assert "HttpOnly" in set_cookie
    assert "SameSite=lax" in set_cookie


@pytest.mark.asyncio
async def test_login_wrong_pin(anon_client: AsyncClient, db_session: AsyncSession):
    await _user(db_session)
    resp = await anon_client.post(
        "/api/v1/auth/login", json={"phone_or_email": "teacher@school.com", "pin": "1111"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_pin_format(anon_client: AsyncClient):
    resp = await anon_client.post(
        "/api/v1/auth/login", json={"phone_or_email": "x@school.com", "pin": "12"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_me_with_bearer_token(anon_client: AsyncClient, db_session: AsyncSession):
    user = await _user(db_session)
    profile = Teacher(name="Pat", department="D", subject="S", user_id=user.id)
    db_session.add(profile)
    await db_session.commit()

    token = create_access_token(user.id, role=user.role)
    resp = await anon_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["teacher_id"] == profile.id
    assert resp.json()["role"] == ROLE_TEACHER


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(anon_client: AsyncClient):
    resp = await anon_client.get("/api/v1/teachers")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_teacher_cannot_mark(anon_client: AsyncClient, db_session: AsyncSession):
    user = await _user(db_session)
    token = create_access_token(user.id, role=user.role)
    resp = await anon_client.post(
        "/api/v1/attendance/mark",
        json={"teacher_id": 1, "date": "2026-03-02", "status": "PRESENT"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_change_pin(anon_client: AsyncClient, db_session: AsyncSession):
    user = await _user(db_session, role=ROLE_ADMIN, pin="1234")
    headers = {"Authorization": f"Bearer {create_access_token(user.id)}"}

    bad = await anon_client.post(
        "/api/v1/auth/change-pin", json={"old_pin": "0000", "new_pin": "5678"}, headers=headers
    )
    assert bad.status_code == 401

    ok = await anon_client.post(
        "/api/v1/auth/change-pin", json={"old_pin": "1234", "new_pin": "5678"}, headers=headers
    )
    assert ok.status_code == 200

    login = await anon_client.post(
        "/api/v1/auth/login", json={"phone_or_email": "admin@school.com", "pin": "5678"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(anon_client: AsyncClient, db_session: AsyncSession):
    await _user(db_session)
    login = await anon_client.post(
        "/api/v1/auth/login", json={"phone_or_email": "teacher@school.com", "pin": "2468"}
    )
    refresh_token = login.json()["refresh_token"]
    resp = await anon_client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 200
    assert decode_access_token(resp.json()["access_token"]) is not None

    bogus = await anon_client.post("/api/v1/auth/refresh", json={"refresh_token": "nope"})
    assert bogus.status_code == 401
