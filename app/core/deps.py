"""
Dependencies and guards for FastAPI endpoints
"""
from typing import Generator
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.db.session import SessionLocal
from app.core.errors import PermissionDeniedError, SessionInvalidError
from app.core.permissions import FeatureKey, has_permission
from app.models.staff_user import StaffUser
from app.services.auth_service import require_session


security = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_current_staff(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> StaffUser:
    """
    Resolve the staff user behind the bearer session token.

    The server re-checks expiry on every call; whatever the client believes
    about its session is advisory only.
    """
    if credentials is None:
        raise SessionInvalidError("Not authenticated")
    return require_session(db, credentials.credentials)


def ensure_permission(staff: StaffUser, feature: FeatureKey) -> None:
    if not has_permission(staff.role, feature):
        raise PermissionDeniedError(f"Access denied. Missing permission: {feature.value}")


def require_feature(feature: FeatureKey):
    """
    Dependency factory for role-based access control

    Usage:
        @router.get("/reports")
        async def reports(user: StaffUser = Depends(require_feature(FeatureKey.VIEW_REPORTS))):
            ...
    """
    def feature_checker(current_staff: StaffUser = Depends(get_current_staff)) -> StaffUser:
        ensure_permission(current_staff, feature)
        return current_staff
    return feature_checker
