"""
Pytest configuration and fixtures
"""
import os

# Keep the app's own engine off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from app.main import app
from app.db.base import Base
from app.core.deps import get_db
from app.core.security import hash_password
from app.models.staff_user import StaffRole, StaffUser
from app.services.notification_service import EmailNotifier, get_notifier

# Import all models to ensure they're registered with Base.metadata
from app import models  # noqa: F401


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

STAFF_PASSWORD = "secret123"
STAFF_AUTH_URL = "/api/v1/staff-auth"


class RecordingNotifier(EmailNotifier):
    """Keeps every email instead of sending it"""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send(self, to_email: str, subject: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("email API down")
        self.sent.append({"to": to_email, "subject": subject, "body": body})


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(db, notifier):
    """Test client fixture with database and notifier overrides"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_staff(db):
    """Factory: make_staff(username, role=StaffRole.SECRETARY, active=True)"""
    def _make(username: str, role: StaffRole = StaffRole.SECRETARY, active: bool = True,
              full_name: str = None, password: str = STAFF_PASSWORD) -> StaffUser:
        staff = StaffUser(
            username=username,
            password_hash=hash_password(password),
            full_name=full_name or username.replace("_", " ").title(),
            role=role.value,
            is_active=active,
        )
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff
    return _make


@pytest.fixture
def admin_user(make_staff):
    return make_staff("admin", StaffRole.ADMIN, full_name="System Administrator")


@pytest.fixture
def secretary(make_staff):
    return make_staff("secretary", StaffRole.SECRETARY, full_name="Maria Santos")


@pytest.fixture
def sk_chairman(make_staff):
    return make_staff("skchair", StaffRole.SK_CHAIRMAN, full_name="Juan Dela Cruz")


def _login(client, username: str, password: str = STAFF_PASSWORD) -> str:
    response = client.post(STAFF_AUTH_URL, json={"action": "login", "username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def admin_token(client, admin_user):
    return _login(client, admin_user.username)


@pytest.fixture
def secretary_token(client, secretary):
    return _login(client, secretary.username)


@pytest.fixture
def sk_token(client, sk_chairman):
    return _login(client, sk_chairman.username)


def submit_payload(**overrides):
    payload = {
        "certificate_type": "Barangay Clearance",
        "full_name": "Ana Reyes",
        "contact_number": "09171234567",
        "household_code": "HH01",
        "purpose": "Employment",
        "email": "ana@example.com",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def submit_request(client):
    """Factory: submit a certificate request and return its control number"""
    def _submit(**overrides) -> str:
        response = client.post("/api/v1/certificates", json=submit_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()["control_number"]
    return _submit


@pytest.fixture
def login_as(client):
    """Factory: log in through the endpoint and return the session token"""
    def _do(username: str, password: str = STAFF_PASSWORD) -> str:
        return _login(client, username, password)
    return _do


@pytest.fixture
def staff_auth(client):
    """Factory: POST an action to the staff-auth endpoint"""
    def _call(action: str, token: str = None, **payload):
        body = {"action": action, **payload}
        if token is not None:
            body["token"] = token
        return client.post(STAFF_AUTH_URL, json=body)
    return _call


@pytest.fixture
def certificate_payload():
    return submit_payload
