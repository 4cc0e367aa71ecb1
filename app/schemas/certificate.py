"""
Certificate request schemas. Datetimes are serialized in Asia/Manila (+08:00).
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer

from app.utils.datetime_utils import iso_local


class CertificateSubmitRequest(BaseModel):
    """Resident submission. Format rules are enforced by the service."""
    certificate_type: str = Field(..., description="e.g. Barangay Clearance")
    full_name: str = Field(..., description="Requester's full name")
    contact_number: str = Field(..., description="11-digit mobile number starting with 09")
    household_code: str = Field(..., description="Household code, 3-5 characters")
    purpose: str = Field(..., description="Purpose of the certificate")
    email: Optional[str] = Field(None, description="Email for status notifications")
    birth_date: Optional[date] = None
    priority: Optional[str] = Field(None, description="Regular or Urgent (default Regular)")
    preferred_pickup_date: Optional[date] = None


class CertificateSubmitResponse(BaseModel):
    success: bool = True
    control_number: str
    status: str
    message: str = "Certificate request submitted successfully"


class CertificateRequestOut(BaseModel):
    id: int
    control_number: str
    certificate_type: str
    resident_name: str
    resident_contact: str
    resident_email: Optional[str]
    birth_date: Optional[date]
    household_code: str
    purpose: str
    priority: str
    preferred_pickup_date: Optional[date]
    status: str
    requested_at: datetime
    processed_by: Optional[str]
    processed_at: Optional[datetime]
    remarks: Optional[str]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("requested_at", "processed_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_local(dt) if dt is not None else None


class TimelineStep(BaseModel):
    label: str
    completed: bool


class CertificateTrackOut(BaseModel):
    """Public view of a request: no contact details"""
    control_number: str
    certificate_type: str
    resident_name: str
    purpose: str
    status: str
    requested_at: datetime
    remarks: Optional[str]
    timeline: List[TimelineStep]

    @field_serializer("requested_at", when_used="always")
    def _ser_requested_at(self, dt):
        return iso_local(dt)


class CertificateListResponse(BaseModel):
    items: List[CertificateRequestOut]
    total: int


class AdvanceOutcome(BaseModel):
    control_number: str
    success: bool
    status: Optional[str] = None
    code: Optional[str] = None
    detail: Optional[str] = None


class BulkAdvanceResponse(BaseModel):
    items: List[AdvanceOutcome]
    succeeded: int
    failed: int
