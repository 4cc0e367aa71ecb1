"""
Staff authentication service

Sessions are opaque bearer tokens stored in ``staff_sessions``:
- login issues a token valid for SESSION_TTL_HOURS
- validate never renews; expired or missing sessions fail closed
- extend pushes the expiry forward without rotating the token, and works
  until the expiry sweep removes the row
- logout deletes the row and is idempotent
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import AUDIT_ACTION_LOGIN, AUDIT_ACTION_LOGOUT, ENTITY_STAFF_USER
from app.core.errors import (
    AccountInactiveError,
    InvalidCredentialsError,
    RateLimitedError,
    SessionInvalidError,
)
from app.core.security import generate_session_token, verify_password
from app.models.login_attempt import LoginAttempt
from app.models.staff_session import StaffSession
from app.models.staff_user import StaffUser
from app.services.audit_service import log_staff_action
from app.utils.datetime_utils import ensure_utc, now_utc

logger = logging.getLogger(__name__)


def session_ttl() -> timedelta:
    return timedelta(hours=settings.SESSION_TTL_HOURS)


def is_session_expired(session: StaffSession, now: Optional[datetime] = None) -> bool:
    now = now or now_utc()
    return ensure_utc(session.expires_at) <= now


def _failed_attempts_in_window(db: Session, username: str, now: datetime) -> int:
    """Failures inside the lockout window that happened after the last success"""
    cutoff = now - timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
    last_success = (
        db.query(LoginAttempt)
        .filter(LoginAttempt.username == username, LoginAttempt.success == True)  # noqa: E712
        .order_by(LoginAttempt.created_at.desc())
        .first()
    )
    if last_success is not None:
        cutoff = max(cutoff, ensure_utc(last_success.created_at))
    return (
        db.query(LoginAttempt)
        .filter(
            LoginAttempt.username == username,
            LoginAttempt.success == False,  # noqa: E712
            LoginAttempt.created_at > cutoff,
        )
        .count()
    )


def _record_attempt(db: Session, username: str, success: bool, now: datetime) -> None:
    db.add(LoginAttempt(username=username, success=success, created_at=now))
    db.commit()


def authenticate(db: Session, username: str, password: str) -> StaffUser:
    """
    Check credentials and return the matching active staff user.

    Raises:
        RateLimitedError: too many recent failures for this username
        InvalidCredentialsError: unknown username or wrong password
        AccountInactiveError: credentials match a deactivated account
    """
    now = now_utc()
    username = (username or "").strip()

    if _failed_attempts_in_window(db, username, now) >= settings.LOGIN_MAX_FAILED_ATTEMPTS:
        _record_attempt(db, username, False, now)
        logger.warning("Login throttled for username=%s", username)
        raise RateLimitedError()

    staff = db.query(StaffUser).filter(StaffUser.username == username).first()
    if staff is None or not verify_password(password or "", staff.password_hash):
        _record_attempt(db, username, False, now)
        logger.info("Failed login for username=%s", username)
        raise InvalidCredentialsError()

    if not staff.is_active:
        _record_attempt(db, username, False, now)
        logger.info("Login refused for deactivated account username=%s", username)
        raise AccountInactiveError()

    _record_attempt(db, username, True, now)
    return staff


def login(db: Session, username: str, password: str) -> Tuple[StaffSession, StaffUser]:
    """
    Authenticate and open a new session.

    Earlier sessions of the same user stay valid.
    """
    staff = authenticate(db, username, password)
    now = now_utc()

    session = StaffSession(
        token=generate_session_token(),
        staff_id=staff.id,
        expires_at=now + session_ttl(),
        created_at=now,
    )
    staff.last_login = now
    db.add(session)
    db.commit()
    db.refresh(session)

    # Audit failure must not fail the login
    try:
        log_staff_action(
            db,
            staff,
            action=AUDIT_ACTION_LOGIN,
            entity_type=ENTITY_STAFF_USER,
            entity_id=staff.id,
            details={"username": staff.username, "role": staff.role},
        )
    except Exception as e:
        db.rollback()
        logger.warning(f"Failed to log audit for login: {e}")

    logger.info("Staff login username=%s session_id=%s", staff.username, session.id)
    return session, staff


def get_session_by_token(db: Session, token: Optional[str]) -> Optional[StaffSession]:
    if not token:
        return None
    return db.query(StaffSession).filter(StaffSession.token == token).first()


def validate_session(db: Session, token: Optional[str]) -> Optional[StaffUser]:
    """Return the session owner, or None if the token grants no access"""
    session = get_session_by_token(db, token)
    if session is None or is_session_expired(session):
        return None
    staff = session.staff
    if staff is None or not staff.is_active:
        return None
    return staff


def require_session(db: Session, token: Optional[str]) -> StaffUser:
    staff = validate_session(db, token)
    if staff is None:
        raise SessionInvalidError()
    return staff


def extend_session(db: Session, token: Optional[str]) -> StaffSession:
    """
    Move the expiry to now + SESSION_TTL_HOURS.

    The session may already be past its expiry as long as the row has not
    been swept, so a client can renew at the last moment.
    """
    session = get_session_by_token(db, token)
    if session is None or session.staff is None or not session.staff.is_active:
        raise SessionInvalidError()

    session.expires_at = now_utc() + session_ttl()
    db.commit()
    db.refresh(session)
    logger.info("Session extended session_id=%s staff_id=%s", session.id, session.staff_id)
    return session


def logout(db: Session, token: Optional[str]) -> bool:
    """
    Delete the session for ``token``.

    Returns True when a session was removed. Unknown tokens are not an error.
    """
    session = get_session_by_token(db, token)
    if session is None:
        return False

    staff = session.staff
    db.delete(session)
    db.commit()

    if staff is not None:
        try:
            log_staff_action(
                db,
                staff,
                action=AUDIT_ACTION_LOGOUT,
                entity_type=ENTITY_STAFF_USER,
                entity_id=staff.id,
                details={"username": staff.username},
            )
        except Exception as e:
            db.rollback()
            logger.warning(f"Failed to log audit for logout: {e}")
    return True


def describe_session(db: Session, token: Optional[str]) -> Dict[str, Any]:
    """
    Session summary for the dashboard header: owner, expiry, and whether the
    expiry warning should be shown.
    """
    session = get_session_by_token(db, token)
    staff = validate_session(db, token)
    if session is None or staff is None:
        raise SessionInvalidError()

    expires_at = ensure_utc(session.expires_at)
    remaining = max(0, int((expires_at - now_utc()).total_seconds()))
    return {
        "user": staff,
        "expires_at": expires_at,
        "expires_in_seconds": remaining,
        "expiring_soon": remaining <= settings.SESSION_WARNING_MINUTES * 60,
    }


def revoke_sessions_for_staff(db: Session, staff_id: int) -> int:
    deleted = db.query(StaffSession).filter(StaffSession.staff_id == staff_id).delete(synchronize_session=False)
    db.commit()
    return deleted


def purge_expired_sessions(db: Session) -> int:
    """
    Expiry sweep: delete every session whose expiry has passed, and login
    attempts too old to count towards the rate limit.

    Returns the number of sessions removed.
    """
    now = now_utc()
    deleted = (
        db.query(StaffSession)
        .filter(StaffSession.expires_at <= now)
        .delete(synchronize_session=False)
    )
    attempt_cutoff = now - timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
    db.query(LoginAttempt).filter(
        LoginAttempt.created_at < attempt_cutoff
    ).delete(synchronize_session=False)
    db.commit()
    if deleted:
        logger.info("Purged %s expired staff sessions", deleted)
    return deleted
