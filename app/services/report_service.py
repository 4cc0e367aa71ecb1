"""
Dashboard reporting - read-only aggregates over certificate requests and incidents
"""
from collections import Counter
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.certificate import CertificateRequest, CertificateStatus
from app.models.incident import Incident, IncidentStatus
from app.utils.datetime_utils import local_today, to_local


def certificate_summary(db: Session, year: Optional[int] = None) -> Dict[str, Any]:
    """
    Certificate totals by status and type, and per month of ``year``.

    Months are bucketed by the local (Asia/Manila) request date.
    """
    year = year or local_today().year

    by_status = {status.value: 0 for status in CertificateStatus}
    for status, count in (
        db.query(CertificateRequest.status, func.count(CertificateRequest.id))
        .group_by(CertificateRequest.status)
        .all()
    ):
        by_status[status] = count

    by_type = {
        certificate_type: count
        for certificate_type, count in (
            db.query(CertificateRequest.certificate_type, func.count(CertificateRequest.id))
            .group_by(CertificateRequest.certificate_type)
            .order_by(func.count(CertificateRequest.id).desc())
            .all()
        )
    }

    # Bucketed in Python: local-month extraction differs between SQLite and Postgres
    monthly = Counter()
    for (requested_at,) in db.query(CertificateRequest.requested_at).all():
        local = to_local(requested_at)
        if local.year == year:
            monthly[local.month] += 1

    return {
        "year": year,
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_type": by_type,
        "monthly": [{"month": month, "count": monthly.get(month, 0)} for month in range(1, 13)],
    }


def incident_summary(db: Session) -> Dict[str, Any]:
    by_status = {status.value: 0 for status in IncidentStatus}
    for status, count in db.query(Incident.status, func.count(Incident.id)).group_by(Incident.status).all():
        by_status[status] = count
    return {"total": sum(by_status.values()), "by_status": by_status}


def dashboard_summary(db: Session, year: Optional[int] = None) -> Dict[str, Any]:
    return {
        "certificates": certificate_summary(db, year),
        "incidents": incident_summary(db),
    }
