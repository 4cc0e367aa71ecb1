"""
Certificate request lifecycle service

pending -> for_review | verifying -> approved -> ready_for_pickup -> released,
with rejected reachable from pending, for_review and verifying. The allowed
moves live in app.core.lifecycle.CERTIFICATE_TRANSITIONS.

Each staff transition writes one audit entry and emails the requester when an
address is on file. A failed email never undoes a committed transition.
"""
import logging
import re
import secrets
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    AUDIT_ACTION_APPROVE,
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_REJECT,
    AUDIT_ACTION_UPDATE,
    CONTACT_NUMBER_PATTERN,
    CONTROL_NUMBER_PREFIX,
    ENTITY_CERTIFICATE_REQUEST,
    HOUSEHOLD_CODE_MAX_LENGTH,
    HOUSEHOLD_CODE_MIN_LENGTH,
    PERFORMER_RESIDENT,
)
from app.core.errors import FieldValidationError, InvalidTransitionError, NotFoundError
from app.core.lifecycle import can_transition, parse_certificate_status, status_timeline
from app.models.certificate import CertificatePriority, CertificateRequest, CertificateStatus
from app.models.staff_user import StaffUser
from app.schemas.certificate import CertificateSubmitRequest
from app.services.audit_service import log_audit, log_staff_action
from app.services.notification_service import EmailNotifier, get_notifier, notify_status_change
from app.utils.datetime_utils import local_today, now_utc
from app.utils.numbering import allocate_unique_number

logger = logging.getLogger(__name__)

_CONTACT_RE = re.compile(CONTACT_NUMBER_PATTERN)
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_AUDIT_ACTION_FOR_STATUS = {
    CertificateStatus.APPROVED: AUDIT_ACTION_APPROVE,
    CertificateStatus.REJECTED: AUDIT_ACTION_REJECT,
}


def generate_control_number(today: Optional[date] = None) -> str:
    """CERT-YYYYMMDD-NNNN with a random 0000-9999 suffix"""
    today = today or local_today()
    return f"{CONTROL_NUMBER_PREFIX}-{today.strftime('%Y%m%d')}-{secrets.randbelow(10000):04d}"


def _control_number_exists(db: Session, control_number: str) -> bool:
    return db.query(CertificateRequest.id).filter(
        CertificateRequest.control_number == control_number
    ).first() is not None


def allocate_control_number(db: Session) -> str:
    """Pick a control number not used yet (see allocate_unique_number)"""
    return allocate_unique_number(
        lambda: generate_control_number(),
        lambda candidate: _control_number_exists(db, candidate),
        settings.CONTROL_NUMBER_MAX_ATTEMPTS,
        label="control number",
    )


def _required(value: Optional[str], field: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise FieldValidationError(field, f"{label} is required")
    return value


def _normalize_priority(value: Optional[str]) -> str:
    if not value or not value.strip():
        return CertificatePriority.REGULAR.value
    normalized = value.strip().capitalize()
    try:
        return CertificatePriority(normalized).value
    except ValueError:
        raise FieldValidationError("priority", "Priority must be Regular or Urgent")


def submit_certificate_request(db: Session, data: CertificateSubmitRequest) -> CertificateRequest:
    """
    Validate a resident submission and store it as pending.

    Raises:
        FieldValidationError: naming the first offending field
    """
    certificate_type = _required(data.certificate_type, "certificate_type", "Certificate type")
    full_name = _required(data.full_name, "full_name", "Full name")
    contact_number = _required(data.contact_number, "contact_number", "Contact number")
    household_code = _required(data.household_code, "household_code", "Household code")
    purpose = _required(data.purpose, "purpose", "Purpose")

    if not _CONTACT_RE.match(contact_number):
        raise FieldValidationError("contact_number", "Contact number must be 11 digits starting with 09")

    if not HOUSEHOLD_CODE_MIN_LENGTH <= len(household_code) <= HOUSEHOLD_CODE_MAX_LENGTH:
        raise FieldValidationError(
            "household_code",
            f"Household code must be {HOUSEHOLD_CODE_MIN_LENGTH}-{HOUSEHOLD_CODE_MAX_LENGTH} characters",
        )

    email = (data.email or "").strip() or None
    if email is not None and not _EMAIL_RE.match(email):
        raise FieldValidationError("email", "Email address is not valid")

    priority = _normalize_priority(data.priority)

    request = CertificateRequest(
        control_number=allocate_control_number(db),
        certificate_type=certificate_type,
        resident_name=full_name,
        resident_contact=contact_number,
        resident_email=email,
        birth_date=data.birth_date,
        household_code=household_code,
        purpose=purpose,
        priority=priority,
        preferred_pickup_date=data.preferred_pickup_date,
        status=CertificateStatus.PENDING.value,
        requested_at=now_utc(),
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    log_audit(
        db=db,
        action=AUDIT_ACTION_CREATE,
        entity_type=ENTITY_CERTIFICATE_REQUEST,
        entity_id=request.control_number,
        performed_by=full_name,
        performed_by_type=PERFORMER_RESIDENT,
        details={"certificate_type": certificate_type, "priority": priority},
    )

    logger.info("Certificate request submitted control_number=%s", request.control_number)
    return request


def get_certificate_request(db: Session, control_number: str) -> CertificateRequest:
    request = (
        db.query(CertificateRequest)
        .filter(CertificateRequest.control_number == (control_number or "").strip())
        .order_by(CertificateRequest.id.asc())
        .first()
    )
    if request is None:
        raise NotFoundError(f"No request found with control number {control_number}")
    return request


def advance_certificate_request(
    db: Session,
    control_number: str,
    new_status: str,
    staff: StaffUser,
    notes: Optional[str] = None,
    notifier: Optional[EmailNotifier] = None,
) -> CertificateRequest:
    """
    Move a request to ``new_status``.

    Raises:
        NotFoundError: unknown control number
        InvalidTransitionError: ``new_status`` is not an allowed next status
    """
    request = get_certificate_request(db, control_number)
    current = request.status
    target = parse_certificate_status(new_status)

    if target is None or not can_transition(current, target):
        raise InvalidTransitionError(current, str(new_status))

    notes = (notes or "").strip() or None
    request.status = target.value
    request.processed_by = staff.full_name
    request.processed_by_id = staff.id
    request.processed_at = now_utc()
    if notes:
        request.remarks = notes
    db.commit()
    db.refresh(request)

    details: Dict[str, Any] = {
        "resident_name": request.resident_name,
        "from_status": current,
        "to_status": target.value,
    }
    if notes:
        details["notes"] = notes
    # The transition is already committed; a failed audit write must not undo it
    try:
        log_staff_action(
            db,
            staff,
            action=_AUDIT_ACTION_FOR_STATUS.get(target, AUDIT_ACTION_UPDATE),
            entity_type=ENTITY_CERTIFICATE_REQUEST,
            entity_id=request.control_number,
            details=details,
        )
    except Exception as e:
        db.rollback()
        logger.warning(f"Failed to log audit for {request.control_number}: {e}")

    logger.info(
        "Certificate %s moved %s -> %s by staff_id=%s",
        request.control_number, current, target.value, staff.id,
    )

    notify_status_change(notifier or get_notifier(), request, target.value, notes)
    return request


def bulk_advance_certificate_requests(
    db: Session,
    control_numbers: List[str],
    new_status: str,
    staff: StaffUser,
    notifier: Optional[EmailNotifier] = None,
) -> List[Dict[str, Any]]:
    """
    Apply advance_certificate_request to each control number independently.

    Returns one outcome per control number, in input order.
    """
    notifier = notifier or get_notifier()
    outcomes: List[Dict[str, Any]] = []
    for control_number in control_numbers:
        try:
            request = advance_certificate_request(
                db, control_number, new_status, staff, notifier=notifier
            )
        except HTTPException as exc:
            db.rollback()
            outcomes.append({
                "control_number": control_number,
                "success": False,
                "code": getattr(exc, "code", None),
                "detail": exc.detail,
            })
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Bulk advance failed for %s: %s", control_number, exc)
            outcomes.append({
                "control_number": control_number,
                "success": False,
                "code": "INTERNAL_ERROR",
                "detail": "Database error",
            })
            continue
        outcomes.append({
            "control_number": control_number,
            "success": True,
            "status": request.status,
        })
    return outcomes


def list_certificate_requests(
    db: Session,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[CertificateRequest]:
    """Staff listing, newest first, optionally filtered by status"""
    query = db.query(CertificateRequest)
    if status and status != "all":
        parsed = parse_certificate_status(status)
        if parsed is None:
            raise FieldValidationError("status", f"Unknown status '{status}'")
        query = query.filter(CertificateRequest.status == parsed.value)
    query = query.order_by(CertificateRequest.requested_at.desc(), CertificateRequest.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def track_certificate_request(db: Session, control_number: str) -> Dict[str, Any]:
    """Public tracking view of a request"""
    request = get_certificate_request(db, control_number)
    return {
        "control_number": request.control_number,
        "certificate_type": request.certificate_type,
        "resident_name": request.resident_name,
        "purpose": request.purpose,
        "status": request.status,
        "requested_at": request.requested_at,
        "remarks": request.remarks,
        "timeline": status_timeline(request.status),
    }
