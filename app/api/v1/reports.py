"""
Dashboard report endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_feature
from app.core.permissions import FeatureKey
from app.models.staff_user import StaffUser
from app.services.report_service import dashboard_summary

router = APIRouter()


@router.get("/summary")
async def get_summary(
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Defaults to the current year (Asia/Manila)"),
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(require_feature(FeatureKey.VIEW_REPORTS)),
):
    """
    Certificate and incident totals for the staff dashboard

    Certificates are counted by status, by type and per month of ``year``;
    incidents by status.
    """
    return dashboard_summary(db, year)
