"""
Database initialization script
Helper function to seed one demo staff account per role
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.staff_user import StaffRole, StaffUser
from app.services.staff_service import create_staff_user, ensure_initial_admin

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "Barangay@123"  # Local/staging only

DEMO_STAFF = [
    ("captain", "Demo Barangay Captain", StaffRole.BARANGAY_CAPTAIN),
    ("official", "Demo Barangay Official", StaffRole.BARANGAY_OFFICIAL),
    ("secretary", "Demo Secretary", StaffRole.SECRETARY),
    ("skchair", "Demo SK Chairman", StaffRole.SK_CHAIRMAN),
]


def init_db(db: Session) -> List[StaffUser]:
    """
    Create the initial admin plus demo accounts that don't exist yet.

    This is a helper function and should NOT be auto-run on startup.
    Returns the accounts created by this call.
    """
    if settings.APP_ENV == "prod":
        raise RuntimeError("Demo staff accounts must not be seeded in production")

    created = []
    admin = ensure_initial_admin(
        db,
        username=settings.INITIAL_ADMIN_USERNAME,
        password=settings.INITIAL_ADMIN_PASSWORD,
        full_name=settings.INITIAL_ADMIN_FULL_NAME,
    )
    if admin:
        created.append(admin)

    for username, full_name, role in DEMO_STAFF:
        if db.query(StaffUser).filter(StaffUser.username == username).first():
            logger.info("Staff user %s already exists, skipping", username)
            continue
        created.append(create_staff_user(db, username, DEMO_PASSWORD, full_name, role.value))
    return created
