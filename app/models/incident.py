"""
Incident (blotter) model
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime
from sqlalchemy.sql import func
import enum
from app.db.base import Base


class IncidentStatus(str, enum.Enum):
    OPEN = "open"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, index=True)
    incident_number = Column(String, nullable=False, index=True)
    incident_type = Column(String, nullable=False)
    incident_date = Column(Date, nullable=False)
    complainant_name = Column(String, nullable=False)
    complainant_contact = Column(String, nullable=True)
    complainant_address = Column(String, nullable=True)
    respondent_name = Column(String, nullable=True)
    respondent_address = Column(String, nullable=True)
    incident_location = Column(String, nullable=True)
    description = Column(Text, nullable=False)
    action_taken = Column(Text, nullable=True)
    status = Column(String, nullable=False, default=IncidentStatus.OPEN.value, index=True)
    reported_by = Column(String, nullable=False)
    handled_by = Column(String, nullable=True)
    resolution_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
