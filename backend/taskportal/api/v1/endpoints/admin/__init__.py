"""
Admin API endpoints for the Student Task Portal.
All endpoints require the admin role.
"""
from fastapi import APIRouter

from taskportal.api.v1.endpoints.admin import dashboard, students, profile

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

# Include all admin sub-routers
admin_router.include_router(dashboard.router, tags=["Admin Dashboard"])
admin_router.include_router(students.router, prefix="/students", tags=["Admin Students"])
admin_router.include_router(profile.router, prefix="/profile", tags=["Admin Profile"])
