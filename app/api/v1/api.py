"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import attendance, auth, reports, settings, teachers

api_router = APIRouter()

# Auth (login, refresh, PIN, user management)
api_router.include_router(auth.router)

# Teachers
api_router.include_router(teachers.router)

# Attendance check-in/out, mark, edit
api_router.include_router(attendance.router)

# School policy
api_router.include_router(settings.router)

# Reports, exports, health, status
api_router.include_router(reports.router)
