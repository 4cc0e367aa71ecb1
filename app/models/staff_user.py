"""
Staff user model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from app.db.base import Base


class StaffRole(str, enum.Enum):
    ADMIN = "admin"
    BARANGAY_CAPTAIN = "barangay_captain"
    BARANGAY_OFFICIAL = "barangay_official"
    SECRETARY = "secretary"
    SK_CHAIRMAN = "sk_chairman"


class StaffUser(Base):
    __tablename__ = "staff_users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(String, nullable=False)  # StaffRole value
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    sessions = relationship("StaffSession", back_populates="staff", cascade="all, delete-orphan")
