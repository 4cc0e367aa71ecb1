"""
Public certificate request endpoints: resident submission and tracking
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.schemas.certificate import (
    CertificateSubmitRequest,
    CertificateSubmitResponse,
    CertificateTrackOut,
)
from app.services.certificate_service import (
    submit_certificate_request,
    track_certificate_request,
)

router = APIRouter()


@router.post("", response_model=CertificateSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_certificate(
    request: CertificateSubmitRequest,
    db: Session = Depends(get_db),
):
    """
    Submit a certificate request

    No login required. Returns the generated control number
    (CERT-YYYYMMDD-NNNN) the resident uses to track the request.
    """
    created = submit_certificate_request(db, request)
    return CertificateSubmitResponse(control_number=created.control_number, status=created.status)


@router.get("/{control_number}", response_model=CertificateTrackOut)
async def track_certificate(
    control_number: str,
    db: Session = Depends(get_db),
):
    """Track a certificate request by control number"""
    return track_certificate_request(db, control_number.strip().upper())
