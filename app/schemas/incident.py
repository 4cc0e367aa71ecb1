"""
Incident (blotter) schemas
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer

from app.utils.datetime_utils import iso_local


class IncidentCreate(BaseModel):
    incident_type: str = Field(..., min_length=1)
    complainant_name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    incident_date: Optional[date] = Field(None, description="Defaults to today (Asia/Manila)")
    complainant_contact: Optional[str] = None
    complainant_address: Optional[str] = None
    respondent_name: Optional[str] = None
    respondent_address: Optional[str] = None
    incident_location: Optional[str] = None
    action_taken: Optional[str] = None


class IncidentStatusUpdate(BaseModel):
    status: str = Field(..., description="investigating or resolved")


class IncidentOut(BaseModel):
    id: int
    incident_number: str
    incident_type: str
    incident_date: date
    complainant_name: str
    complainant_contact: Optional[str]
    complainant_address: Optional[str]
    respondent_name: Optional[str]
    respondent_address: Optional[str]
    incident_location: Optional[str]
    description: str
    action_taken: Optional[str]
    status: str
    reported_by: str
    handled_by: Optional[str]
    resolution_date: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("resolution_date", when_used="always")
    def _ser_resolution_date(self, dt):
        return iso_local(dt) if dt is not None else None


class IncidentListResponse(BaseModel):
    items: List[IncidentOut]
    total: int
