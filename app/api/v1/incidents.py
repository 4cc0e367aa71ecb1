"""
Incident blotter endpoints (staff, bearer session)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_feature
from app.core.permissions import FeatureKey
from app.models.staff_user import StaffUser
from app.schemas.incident import IncidentCreate, IncidentListResponse, IncidentOut, IncidentStatusUpdate
from app.services.incident_service import create_incident, list_incidents, update_incident_status

router = APIRouter()


@router.get("", response_model=IncidentListResponse)
async def get_incidents(
    status_filter: Optional[str] = Query(None, alias="status", description="open, investigating, resolved or all"),
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(require_feature(FeatureKey.INCIDENTS)),
):
    """List incidents, newest first"""
    incidents = list_incidents(db, status=status_filter)
    return IncidentListResponse(
        items=[IncidentOut.model_validate(i) for i in incidents],
        total=len(incidents),
    )


@router.post("", response_model=IncidentOut, status_code=status.HTTP_201_CREATED)
async def record_incident(
    request: IncidentCreate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(require_feature(FeatureKey.INCIDENTS)),
):
    return create_incident(db, request, current_staff)


@router.post("/{incident_number}/status", response_model=IncidentOut)
async def change_incident_status(
    incident_number: str,
    request: IncidentStatusUpdate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(require_feature(FeatureKey.INCIDENTS)),
):
    """
    Move an incident forward: open -> investigating -> resolved.

    Any other move returns 409 INVALID_TRANSITION.
    """
    return update_incident_status(db, incident_number, request.status, current_staff)
