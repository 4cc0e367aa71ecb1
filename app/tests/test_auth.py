"""
Tests for staff login, validate and logout through the staff-auth endpoint
"""
from fastapi import status
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.staff_session import StaffSession
from app.models.staff_user import StaffRole


def test_login_success(staff_auth, secretary, db: Session):
    """Test successful login returns token, user and expiry"""
    response = staff_auth("login", username="secretary", password="secret123")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert len(data["token"]) >= 32
    assert data["expiresAt"].endswith("Z")
    assert data["user"] == {
        "id": secretary.id,
        "username": "secretary",
        "fullName": "Maria Santos",
        "role": "secretary",
    }

    session = db.query(StaffSession).filter(StaffSession.token == data["token"]).first()
    assert session is not None
    assert session.staff_id == secretary.id

    db.refresh(secretary)
    assert secretary.last_login is not None


def test_login_wrong_password(staff_auth, secretary):
    response = staff_auth("login", username="secretary", password="wrongpassword")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_unknown_username(staff_auth):
    response = staff_auth("login", username="nobody", password="secret123")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_inactive_account(staff_auth, make_staff):
    make_staff("retired", StaffRole.BARANGAY_OFFICIAL, active=False)

    response = staff_auth("login", username="retired", password="secret123")

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "ACCOUNT_INACTIVE"


def test_inactive_account_with_wrong_password_is_invalid_credentials(staff_auth, make_staff):
    make_staff("retired", StaffRole.BARANGAY_OFFICIAL, active=False)

    response = staff_auth("login", username="retired", password="nope")

    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_missing_username(staff_auth):
    response = staff_auth("login", password="secret123")

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert data["field"] == "username"


def test_login_writes_audit_entry(staff_auth, secretary, db: Session):
    staff_auth("login", username="secretary", password="secret123")

    entry = db.query(AuditLog).filter(AuditLog.action == "login").one()
    assert entry.entity_type == "staff_user"
    assert entry.entity_id == str(secretary.id)
    assert entry.performed_by == "Maria Santos"
    assert entry.performed_by_type == "staff"


def test_admin_login_audited_as_admin(staff_auth, admin_user, db: Session):
    staff_auth("login", username="admin", password="secret123")

    entry = db.query(AuditLog).filter(AuditLog.action == "login").one()
    assert entry.performed_by_type == "admin"


def test_two_logins_give_two_valid_sessions(staff_auth, login_as, secretary):
    first = login_as("secretary")
    second = login_as("secretary")

    assert first != second
    assert staff_auth("validate", token=first).json()["valid"] is True
    assert staff_auth("validate", token=second).json()["valid"] is True


def test_validate_valid_token(staff_auth, secretary_token):
    response = staff_auth("validate", token=secretary_token)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["valid"] is True
    assert data["user"]["username"] == "secretary"


def test_validate_unknown_token(staff_auth):
    response = staff_auth("validate", token="not-a-real-token")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["valid"] is False


def test_validate_without_token(staff_auth):
    response = staff_auth("validate")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["valid"] is False


def test_logout_then_validate_fails(staff_auth, secretary_token, db: Session):
    response = staff_auth("logout", token=secretary_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True}
    assert staff_auth("validate", token=secretary_token).json()["valid"] is False
    assert db.query(AuditLog).filter(AuditLog.action == "logout").count() == 1


def test_logout_is_idempotent(staff_auth, secretary_token, db: Session):
    staff_auth("logout", token=secretary_token)
    response = staff_auth("logout", token=secretary_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True}
    # Only the logout that removed a session is audited
    assert db.query(AuditLog).filter(AuditLog.action == "logout").count() == 1


def test_unknown_action(staff_auth, secretary_token):
    response = staff_auth("delete-everything", token=secretary_token)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "UNKNOWN_ACTION"


def test_password_hash_not_plaintext(secretary):
    assert secretary.password_hash != "secret123"
    assert secretary.password_hash.startswith("$")
