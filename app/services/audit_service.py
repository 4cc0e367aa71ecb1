"""
Audit logging service
"""
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session
from app.core.constants import PERFORMER_ADMIN, PERFORMER_STAFF
from app.models.audit_log import AuditLog
from app.models.staff_user import StaffUser, StaffRole
from app.utils.datetime_utils import now_utc
from app.utils.json_serializer import sanitize_for_json

DEFAULT_AUDIT_LIMIT = 100
MAX_AUDIT_LIMIT = 500


def log_audit(
    db: Session,
    action: str,
    entity_type: str,
    performed_by: str,
    performed_by_type: str,
    entity_id: Optional[Any] = None,
    staff_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        action: Action type (e.g. "create", "approve", "reject", "login")
        entity_type: Type of entity (e.g. "certificate_request", "staff_user")
        performed_by: Display name of the actor
        performed_by_type: "staff", "admin", "resident" or "system"
        entity_id: Control number, incident number or row id (optional)
        staff_id: ID of the acting staff user, when there is one
        details: Free-form key/value metadata (optional)

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        performed_by=performed_by,
        performed_by_type=performed_by_type,
        staff_id=staff_id,
        details=sanitize_for_json(details) if details is not None else None,
        created_at=now_utc()
    )
    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)
    return audit_log


def log_staff_action(
    db: Session,
    staff: StaffUser,
    action: str,
    entity_type: str,
    entity_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """Audit an action taken by a logged-in staff member"""
    performer_type = PERFORMER_ADMIN if staff.role == StaffRole.ADMIN.value else PERFORMER_STAFF
    return log_audit(
        db=db,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        performed_by=staff.full_name,
        performed_by_type=performer_type,
        staff_id=staff.id,
        details=details,
    )


def list_audit_logs(
    db: Session,
    entity_type: Optional[str] = None,
    action: Optional[str] = None,
    limit: Optional[int] = None
) -> List[AuditLog]:
    """
    List audit entries, newest first.

    ``limit`` defaults to 100 and is capped at 500.
    """
    if limit is None or limit <= 0:
        limit = DEFAULT_AUDIT_LIMIT
    limit = min(limit, MAX_AUDIT_LIMIT)

    query = db.query(AuditLog)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if action:
        query = query.filter(AuditLog.action == action)
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
