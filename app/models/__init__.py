"""
Database models
"""
from app.models.staff_user import StaffUser, StaffRole
from app.models.staff_session import StaffSession
from app.models.login_attempt import LoginAttempt
from app.models.certificate import CertificateRequest, CertificateStatus, CertificatePriority
from app.models.audit_log import AuditLog
from app.models.incident import Incident, IncidentStatus

__all__ = [
    "StaffUser",
    "StaffRole",
    "StaffSession",
    "LoginAttempt",
    "CertificateRequest",
    "CertificateStatus",
    "CertificatePriority",
    "AuditLog",
    "Incident",
    "IncidentStatus",
]
