"""
Staff authentication endpoint

A single POST endpoint multiplexes session actions and staff data actions:
the body carries ``{action, token, ...payload}``. Privileged actions resolve
the token to a staff user on every call and check the action's feature
against the role table.
"""
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.deps import get_db, ensure_permission
from app.core.errors import AppError, FieldValidationError
from app.core.permissions import (
    FeatureKey,
    can_access_admin_section,
    get_permitted_features,
    get_role_display_name,
    is_admin_role,
)
from app.models.staff_user import StaffUser
from app.schemas.audit import AuditLogOut
from app.schemas.auth import (
    ExtendResponse,
    LoginResponse,
    PermissionsResponse,
    SessionInfoResponse,
    StaffAuthRequest,
    StaffUserOut,
    ValidateResponse,
)
from app.schemas.certificate import BulkAdvanceResponse, CertificateListResponse, CertificateRequestOut
from app.services import auth_service
from app.services.audit_service import list_audit_logs
from app.services.certificate_service import (
    advance_certificate_request,
    bulk_advance_certificate_requests,
    list_certificate_requests,
)
from app.services.notification_service import EmailNotifier, get_notifier
from app.services.staff_service import change_password, set_staff_active

logger = logging.getLogger(__name__)

router = APIRouter()

StaffHandler = Callable[[Session, StaffAuthRequest, StaffUser, EmailNotifier], Any]


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


# ---------- session actions (no session required) ----------

def _login(db: Session, body: StaffAuthRequest) -> Dict[str, Any]:
    if not body.username:
        raise FieldValidationError("username", "Username and password are required")
    if not body.password:
        raise FieldValidationError("password", "Username and password are required")

    session, staff = auth_service.login(db, body.username, body.password)
    return _dump(LoginResponse(
        token=session.token,
        user=StaffUserOut.model_validate(staff),
        expires_at=session.expires_at,
    ))


def _logout(db: Session, body: StaffAuthRequest) -> Dict[str, Any]:
    auth_service.logout(db, body.token)
    return {"success": True}


def _validate(db: Session, body: StaffAuthRequest):
    staff = auth_service.validate_session(db, body.token)
    if staff is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"valid": False, "code": "SESSION_INVALID", "error": "Invalid or expired session"},
        )
    return _dump(ValidateResponse(valid=True, user=StaffUserOut.model_validate(staff)))


def _extend(db: Session, body: StaffAuthRequest) -> Dict[str, Any]:
    session = auth_service.extend_session(db, body.token)
    return _dump(ExtendResponse(expires_at=session.expires_at))


SESSION_ACTIONS: Dict[str, Callable[[Session, StaffAuthRequest], Any]] = {
    "login": _login,
    "logout": _logout,
    "validate": _validate,
    "extend": _extend,
}


# ---------- staff actions (valid session required) ----------

def _get_session(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    info = auth_service.describe_session(db, body.token)
    return _dump(SessionInfoResponse(
        user=StaffUserOut.model_validate(info["user"]),
        expires_at=info["expires_at"],
        expires_in_seconds=info["expires_in_seconds"],
        expiring_soon=info["expiring_soon"],
    ))


def _get_permissions(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    features = sorted(feature.value for feature in get_permitted_features(staff.role))
    return _dump(PermissionsResponse(
        role=staff.role,
        role_display_name=get_role_display_name(staff.role),
        features=features,
        can_access_admin_section=can_access_admin_section(staff.role),
        is_admin_role=is_admin_role(staff.role),
    ))


def _get_certificate_requests(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    requests = list_certificate_requests(db, status=body.status_filter, limit=body.limit)
    return CertificateListResponse(
        items=[CertificateRequestOut.model_validate(r) for r in requests],
        total=len(requests),
    ).model_dump(mode="json")


def _advance_certificate_request(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    if not body.control_number:
        raise FieldValidationError("control_number", "Control number is required")
    if not body.new_status:
        raise FieldValidationError("new_status", "New status is required")
    request = advance_certificate_request(
        db, body.control_number, body.new_status, staff, notes=body.notes, notifier=notifier
    )
    return {"success": True, "request": CertificateRequestOut.model_validate(request).model_dump(mode="json")}


def _bulk_advance(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    if not body.control_numbers:
        raise FieldValidationError("control_numbers", "At least one control number is required")
    if not body.new_status:
        raise FieldValidationError("new_status", "New status is required")
    outcomes = bulk_advance_certificate_requests(
        db, body.control_numbers, body.new_status, staff, notifier=notifier
    )
    succeeded = sum(1 for o in outcomes if o["success"])
    return BulkAdvanceResponse(
        items=outcomes, succeeded=succeeded, failed=len(outcomes) - succeeded
    ).model_dump(mode="json")


def _get_audit_logs(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    logs = list_audit_logs(db, entity_type=body.entity_filter, action=body.action_filter, limit=body.limit)
    return {
        "items": [AuditLogOut.model_validate(log).model_dump(mode="json") for log in logs],
        "total": len(logs),
    }


def _change_password(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    change_password(db, staff, body.current_password, body.new_password)
    return {"success": True}


def _set_staff_active(db: Session, body: StaffAuthRequest, staff: StaffUser, notifier: EmailNotifier):
    if body.staff_id is None:
        raise FieldValidationError("staff_id", "Staff id is required")
    if body.active is None:
        raise FieldValidationError("active", "Active flag is required")
    target = set_staff_active(db, staff, body.staff_id, body.active)
    return {"success": True, "user": _dump(StaffUserOut.model_validate(target)), "active": target.is_active}


# action -> (required feature or None for any valid session, handler)
STAFF_ACTIONS: Dict[str, Tuple[Optional[FeatureKey], StaffHandler]] = {
    "get-session": (None, _get_session),
    "get-permissions": (None, _get_permissions),
    "change-password": (None, _change_password),
    "get-certificate-requests": (FeatureKey.CERTIFICATE_REQUESTS, _get_certificate_requests),
    "advance-certificate-request": (FeatureKey.CERTIFICATE_REQUESTS, _advance_certificate_request),
    "bulk-advance-certificate-requests": (FeatureKey.CERTIFICATE_REQUESTS, _bulk_advance),
    "get-audit-logs": (FeatureKey.AUDIT_LOGS, _get_audit_logs),
    "set-staff-active": (FeatureKey.STAFF_MANAGEMENT, _set_staff_active),
}


@router.post("/staff-auth")
async def staff_auth(
    body: StaffAuthRequest,
    db: Session = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """
    Multiplexed staff endpoint.

    Session actions: login, logout, validate, extend.
    Staff actions (token required): get-session, get-permissions,
    change-password, get-certificate-requests, advance-certificate-request,
    bulk-advance-certificate-requests, get-audit-logs, set-staff-active.
    """
    action = (body.action or "login").strip().lower()
    logger.debug("staff-auth action=%s", action)

    if action in SESSION_ACTIONS:
        return SESSION_ACTIONS[action](db, body)

    if action not in STAFF_ACTIONS:
        raise AppError(f"Unknown action '{action}'", status_code=status.HTTP_400_BAD_REQUEST, code="UNKNOWN_ACTION")

    feature, handler = STAFF_ACTIONS[action]
    staff = auth_service.require_session(db, body.token)
    if feature is not None:
        ensure_permission(staff, feature)
    return handler(db, body, staff, notifier)
