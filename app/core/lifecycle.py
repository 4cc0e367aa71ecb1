"""
Status transition tables for certificate requests and incidents

Both the services and the API read these tables; nothing else compares
status strings to decide whether a change is allowed.
"""
from typing import Dict, FrozenSet, List, Optional, Union

from app.models.certificate import CertificateStatus
from app.models.incident import IncidentStatus


CERTIFICATE_TRANSITIONS: Dict[CertificateStatus, FrozenSet[CertificateStatus]] = {
    CertificateStatus.PENDING: frozenset({
        CertificateStatus.FOR_REVIEW,
        CertificateStatus.VERIFYING,
        CertificateStatus.REJECTED,
    }),
    CertificateStatus.FOR_REVIEW: frozenset({CertificateStatus.APPROVED, CertificateStatus.REJECTED}),
    CertificateStatus.VERIFYING: frozenset({CertificateStatus.APPROVED, CertificateStatus.REJECTED}),
    CertificateStatus.APPROVED: frozenset({CertificateStatus.READY_FOR_PICKUP}),
    CertificateStatus.READY_FOR_PICKUP: frozenset({CertificateStatus.RELEASED}),
    CertificateStatus.RELEASED: frozenset(),
    CertificateStatus.REJECTED: frozenset(),
}

# Older clients send "submitted" for a fresh request
_STATUS_ALIASES = {"submitted": CertificateStatus.PENDING}

INCIDENT_TRANSITIONS: Dict[IncidentStatus, FrozenSet[IncidentStatus]] = {
    IncidentStatus.OPEN: frozenset({IncidentStatus.INVESTIGATING}),
    IncidentStatus.INVESTIGATING: frozenset({IncidentStatus.RESOLVED}),
    IncidentStatus.RESOLVED: frozenset(),
}

# (label, statuses for which the step counts as reached)
_APPROVAL_TIMELINE = [
    ("Submitted", {"pending", "for_review", "verifying", "approved", "ready_for_pickup", "released"}),
    ("Under Review", {"for_review", "verifying", "approved", "ready_for_pickup", "released"}),
    ("Approved", {"approved", "ready_for_pickup", "released"}),
    ("Ready for Pickup", {"ready_for_pickup", "released"}),
    ("Released", {"released"}),
]

_REJECTION_TIMELINE = [
    ("Submitted", {"pending", "for_review", "verifying", "rejected"}),
    ("Under Review", {"rejected"}),
    ("Rejected", {"rejected"}),
]


def parse_certificate_status(value: Union[CertificateStatus, str, None]) -> Optional[CertificateStatus]:
    if isinstance(value, CertificateStatus):
        return value
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower().replace(" ", "_")
    if normalized in _STATUS_ALIASES:
        return _STATUS_ALIASES[normalized]
    try:
        return CertificateStatus(normalized)
    except ValueError:
        return None


def parse_incident_status(value: Union[IncidentStatus, str, None]) -> Optional[IncidentStatus]:
    if isinstance(value, IncidentStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return IncidentStatus(value.strip().lower())
    except ValueError:
        return None


def can_transition(current: Union[CertificateStatus, str], target: Union[CertificateStatus, str]) -> bool:
    """True when ``target`` is an allowed next status for ``current``"""
    current_status = parse_certificate_status(current)
    target_status = parse_certificate_status(target)
    if current_status is None or target_status is None:
        return False
    return target_status in CERTIFICATE_TRANSITIONS[current_status]


def can_transition_incident(current: Union[IncidentStatus, str], target: Union[IncidentStatus, str]) -> bool:
    current_status = parse_incident_status(current)
    target_status = parse_incident_status(target)
    if current_status is None or target_status is None:
        return False
    return target_status in INCIDENT_TRANSITIONS[current_status]


def allowed_next_statuses(current: Union[CertificateStatus, str]) -> List[CertificateStatus]:
    current_status = parse_certificate_status(current)
    if current_status is None:
        return []
    return sorted(CERTIFICATE_TRANSITIONS[current_status], key=lambda s: list(CertificateStatus).index(s))


def status_timeline(current: Union[CertificateStatus, str]) -> List[dict]:
    """
    Steps shown on the public tracking page.

    A rejected request follows the short Submitted -> Under Review -> Rejected
    path; every other request follows the approval path.
    """
    current_status = parse_certificate_status(current)
    value = current_status.value if current_status else ""
    steps = _REJECTION_TIMELINE if current_status == CertificateStatus.REJECTED else _APPROVAL_TIMELINE
    return [{"label": label, "completed": value in reached} for label, reached in steps]
