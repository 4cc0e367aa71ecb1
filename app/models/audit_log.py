"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from app.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, nullable=False, index=True)  # e.g. "login", "approve", "reject", "update"
    entity_type = Column(String, nullable=False, index=True)  # e.g. "certificate_request", "staff_user"
    entity_id = Column(String, nullable=True)  # control number, incident number or row id
    performed_by = Column(String, nullable=False)  # display name of the actor
    performed_by_type = Column(String, nullable=False)  # "staff", "admin", "resident", "system"
    staff_id = Column(Integer, ForeignKey("staff_users.id", ondelete="SET NULL"), nullable=True)
    details = Column(JSON, nullable=True)
    # Set explicitly by log_audit to avoid SQLite issues with server_default
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
