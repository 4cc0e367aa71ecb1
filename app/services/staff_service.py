"""
Staff account service - password changes, activation, provisioning helpers
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.constants import AUDIT_ACTION_CREATE, AUDIT_ACTION_UPDATE, ENTITY_STAFF_USER, PERFORMER_SYSTEM
from app.core.errors import AppError, FieldValidationError, NotFoundError, PermissionDeniedError
from app.core.permissions import FeatureKey, has_permission, parse_role
from app.core.security import hash_password, validate_password, verify_password
from app.models.staff_user import StaffRole, StaffUser
from app.services.audit_service import log_audit, log_staff_action
from app.services.auth_service import revoke_sessions_for_staff

logger = logging.getLogger(__name__)


def create_staff_user(
    db: Session,
    username: str,
    password: str,
    full_name: str,
    role: str,
    is_active: bool = True,
) -> StaffUser:
    """
    Provision a staff account.

    Role strings are checked against the closed role set here, where untyped
    data enters the system.
    """
    parsed_role = parse_role(role)
    if parsed_role is None:
        raise FieldValidationError("role", f"Unknown role '{role}'")

    username = (username or "").strip()
    if not username:
        raise FieldValidationError("username", "Username is required")
    if db.query(StaffUser).filter(StaffUser.username == username).first():
        raise AppError(f"Username '{username}' is already taken", status_code=409, code="CONFLICT")

    try:
        password = validate_password(password)
    except ValueError as e:
        raise FieldValidationError("password", str(e))

    staff = StaffUser(
        username=username,
        password_hash=hash_password(password),
        full_name=full_name.strip(),
        role=parsed_role.value,
        is_active=is_active,
    )
    db.add(staff)
    db.commit()
    db.refresh(staff)

    log_audit(
        db=db,
        action=AUDIT_ACTION_CREATE,
        entity_type=ENTITY_STAFF_USER,
        entity_id=staff.id,
        performed_by="system",
        performed_by_type=PERFORMER_SYSTEM,
        details={"new_username": staff.username, "new_role": staff.role},
    )
    return staff


def change_password(db: Session, staff: StaffUser, current_password: str, new_password: str) -> None:
    """Change the caller's own password after re-checking the current one"""
    if not verify_password(current_password or "", staff.password_hash):
        raise FieldValidationError("current_password", "Current password is incorrect")
    try:
        new_password = validate_password(new_password)
    except ValueError as e:
        raise FieldValidationError("new_password", str(e))

    staff.password_hash = hash_password(new_password)
    db.commit()

    log_staff_action(
        db,
        staff,
        action=AUDIT_ACTION_UPDATE,
        entity_type=ENTITY_STAFF_USER,
        entity_id=staff.id,
        details={"action_type": "password_change", "username": staff.username},
    )


def set_staff_active(db: Session, actor: StaffUser, staff_id: int, active: bool) -> StaffUser:
    """
    Activate or deactivate a staff account.

    Deactivation also ends every open session of the target.
    """
    if not has_permission(actor.role, FeatureKey.STAFF_MANAGEMENT):
        raise PermissionDeniedError("Staff management permission required")

    target = db.query(StaffUser).filter(StaffUser.id == staff_id).first()
    if target is None:
        raise NotFoundError(f"Staff user {staff_id} not found")
    if target.id == actor.id and not active:
        raise AppError("You cannot deactivate your own account", status_code=400, code="SELF_DEACTIVATION")

    target.is_active = active
    db.commit()
    db.refresh(target)

    revoked = 0
    if not active:
        revoked = revoke_sessions_for_staff(db, target.id)

    log_staff_action(
        db,
        actor,
        action=AUDIT_ACTION_UPDATE,
        entity_type=ENTITY_STAFF_USER,
        entity_id=target.id,
        details={
            "action_type": "status_change",
            "username": target.username,
            "new_active_status": active,
            "changed_by_role": actor.role,
            "sessions_revoked": revoked,
        },
    )
    logger.info("Staff %s active=%s set by staff_id=%s", target.username, active, actor.id)
    return target


def ensure_initial_admin(
    db: Session,
    username: str,
    password: str,
    full_name: str,
) -> Optional[StaffUser]:
    """
    Create the first admin account when no admin exists.

    Returns the new account, or None when an admin is already present.
    """
    existing = db.query(StaffUser).filter(StaffUser.role == StaffRole.ADMIN.value).first()
    if existing:
        logger.info("Admin user already exists, skipping initial bootstrap")
        return None

    logger.info("No admin user found, creating initial admin account")
    admin = create_staff_user(
        db,
        username=username,
        password=password,
        full_name=full_name,
        role=StaffRole.ADMIN.value,
    )
    logger.info("Initial admin user created: username=%s", admin.username)
    return admin
