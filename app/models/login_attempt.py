"""
Login attempt model (used for throttling repeated failures)
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from app.db.base import Base


class LoginAttempt(Base):
    __tablename__ = "login_attempts"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False)
    success = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_login_attempts_username_created_at", "username", "created_at"),
    )
