"""
Certificate request model
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from app.db.base import Base


class CertificateStatus(str, enum.Enum):
    PENDING = "pending"
    FOR_REVIEW = "for_review"
    VERIFYING = "verifying"
    APPROVED = "approved"
    READY_FOR_PICKUP = "ready_for_pickup"
    RELEASED = "released"
    REJECTED = "rejected"


class CertificatePriority(str, enum.Enum):
    REGULAR = "Regular"
    URGENT = "Urgent"


class CertificateRequest(Base):
    __tablename__ = "certificate_requests"

    id = Column(Integer, primary_key=True, index=True)
    # Not unique: see CONTROL_NUMBER_MAX_ATTEMPTS
    control_number = Column(String, nullable=False, index=True)
    certificate_type = Column(String, nullable=False)
    resident_name = Column(String, nullable=False)
    resident_contact = Column(String, nullable=False)
    resident_email = Column(String, nullable=True)
    birth_date = Column(Date, nullable=True)
    household_code = Column(String, nullable=False)
    purpose = Column(Text, nullable=False)
    priority = Column(String, nullable=False, default=CertificatePriority.REGULAR.value)
    preferred_pickup_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=CertificateStatus.PENDING.value, index=True)
    requested_at = Column(DateTime(timezone=True), nullable=False)
    processed_by = Column(String, nullable=True)
    processed_by_id = Column(Integer, ForeignKey("staff_users.id"), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    processor = relationship("StaffUser", foreign_keys=[processed_by_id])
