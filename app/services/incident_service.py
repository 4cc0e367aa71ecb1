"""
Incident (blotter) service
"""
import secrets
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_UPDATE,
    ENTITY_INCIDENT,
    INCIDENT_NUMBER_PREFIX,
)
from app.core.errors import FieldValidationError, InvalidTransitionError, NotFoundError
from app.core.lifecycle import can_transition_incident, parse_incident_status
from app.models.incident import Incident, IncidentStatus
from app.models.staff_user import StaffUser
from app.schemas.incident import IncidentCreate
from app.services.audit_service import log_staff_action
from app.utils.datetime_utils import local_today, now_utc
from app.utils.numbering import allocate_unique_number


def generate_incident_number(today: Optional[date] = None) -> str:
    """INC-YYYYMM-NNNN"""
    today = today or local_today()
    return f"{INCIDENT_NUMBER_PREFIX}-{today.strftime('%Y%m')}-{secrets.randbelow(10000):04d}"


def _incident_number_exists(db: Session, incident_number: str) -> bool:
    return db.query(Incident.id).filter(
        Incident.incident_number == incident_number
    ).first() is not None


def allocate_incident_number(db: Session) -> str:
    return allocate_unique_number(
        lambda: generate_incident_number(),
        lambda candidate: _incident_number_exists(db, candidate),
        settings.CONTROL_NUMBER_MAX_ATTEMPTS,
        label="incident number",
    )


def create_incident(db: Session, data: IncidentCreate, staff: StaffUser) -> Incident:
    incident = Incident(
        incident_number=allocate_incident_number(db),
        incident_type=data.incident_type.strip(),
        incident_date=data.incident_date or local_today(),
        complainant_name=data.complainant_name.strip(),
        complainant_contact=data.complainant_contact,
        complainant_address=data.complainant_address,
        respondent_name=data.respondent_name,
        respondent_address=data.respondent_address,
        incident_location=data.incident_location,
        description=data.description,
        action_taken=data.action_taken,
        status=IncidentStatus.OPEN.value,
        reported_by=staff.full_name,
    )
    db.add(incident)
    db.commit()
    db.refresh(incident)

    log_staff_action(
        db,
        staff,
        action=AUDIT_ACTION_CREATE,
        entity_type=ENTITY_INCIDENT,
        entity_id=incident.incident_number,
        details={"incident_type": incident.incident_type},
    )
    return incident


def get_incident(db: Session, incident_number: str) -> Incident:
    incident = (
        db.query(Incident)
        .filter(Incident.incident_number == (incident_number or "").strip())
        .order_by(Incident.id.asc())
        .first()
    )
    if incident is None:
        raise NotFoundError(f"Incident {incident_number} not found")
    return incident


def update_incident_status(
    db: Session,
    incident_number: str,
    new_status: str,
    staff: StaffUser,
) -> Incident:
    """open -> investigating -> resolved; resolving stamps the resolution date"""
    incident = get_incident(db, incident_number)
    current = incident.status
    target = parse_incident_status(new_status)
    if target is None or not can_transition_incident(current, target):
        raise InvalidTransitionError(current, str(new_status))

    incident.status = target.value
    incident.handled_by = staff.full_name
    if target == IncidentStatus.RESOLVED:
        incident.resolution_date = now_utc()
    db.commit()
    db.refresh(incident)

    log_staff_action(
        db,
        staff,
        action=AUDIT_ACTION_UPDATE,
        entity_type=ENTITY_INCIDENT,
        entity_id=incident.incident_number,
        details={"from_status": current, "to_status": target.value},
    )
    return incident


def list_incidents(db: Session, status: Optional[str] = None) -> List[Incident]:
    query = db.query(Incident)
    if status and status != "all":
        parsed = parse_incident_status(status)
        if parsed is None:
            raise FieldValidationError("status", f"Unknown status '{status}'")
        query = query.filter(Incident.status == parsed.value)
    return query.order_by(Incident.incident_date.desc(), Incident.id.desc()).all()
