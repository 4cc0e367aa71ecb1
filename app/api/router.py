"""
Main API router
"""
from fastapi import APIRouter

from app.api.v1 import (
    health,
    version,
    staff_auth,
    certificates,
    incidents,
    reports,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(staff_auth.router, tags=["staff-auth"])
api_router.include_router(certificates.router, prefix="/certificates", tags=["certificates"])
api_router.include_router(incidents.router, prefix="/incidents", tags=["incidents"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
