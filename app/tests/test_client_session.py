"""
StaffAuthClient and the client-side session stores
"""
import json
from datetime import timedelta

import httpx
import pytest

from app.client import (
    AuthState,
    FileSessionStore,
    MemorySessionStore,
    NetworkError,
    StaffAuthClient,
    StaffAuthError,
    StoredSession,
)
from app.core.constants import STAFF_SESSION_STORAGE_KEY
from app.utils.datetime_utils import now_utc


class FakeClock:
    def __init__(self):
        self.current = now_utc()

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def staff_client(client, store, clock):
    return StaffAuthClient(client, store, clock=clock)


def _offline_client(store, clock):
    def handler(request):
        raise httpx.ConnectError("network down", request=request)
    http = httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(handler))
    return StaffAuthClient(http, store, clock=clock)


def test_login_persists_session(staff_client, store, secretary):
    user = staff_client.login("secretary", "secret123")

    assert user["username"] == "secretary"
    assert staff_client.state == AuthState.AUTHENTICATED
    stored = store.load()
    assert stored.token == staff_client.token
    assert stored.expires_at == staff_client.expires_at


def test_login_failure_raises_error_with_code(staff_client, secretary):
    with pytest.raises(StaffAuthError) as exc:
        staff_client.login("secretary", "wrong")

    assert exc.value.code == "INVALID_CREDENTIALS"
    assert exc.value.status_code == 401
    assert staff_client.state == AuthState.UNAUTHENTICATED


def test_validate_and_call(staff_client, secretary):
    staff_client.login("secretary", "secret123")

    assert staff_client.validate() is True
    data = staff_client.call("get-permissions")
    assert data["role"] == "secretary"


def test_forbidden_call_keeps_session(staff_client, secretary):
    staff_client.login("secretary", "secret123")

    with pytest.raises(StaffAuthError) as exc:
        staff_client.call("get-audit-logs")

    assert exc.value.code == "FORBIDDEN"
    assert staff_client.state == AuthState.AUTHENTICATED


def test_tick_warns_then_expires(staff_client, store, clock, secretary):
    staff_client.login("secretary", "secret123")
    assert staff_client.tick() is None

    clock.advance(hours=7, minutes=56)
    warning = staff_client.tick()
    assert warning is not None and "expire" in warning
    assert staff_client.tick() is None  # warned once

    clock.advance(minutes=5)
    assert staff_client.tick() == "Your session has expired. Please log in again."
    assert staff_client.state == AuthState.UNAUTHENTICATED
    assert store.load() is None


def test_extend_updates_stored_expiry(staff_client, store, clock, secretary):
    staff_client.login("secretary", "secret123")
    first_expiry = staff_client.expires_at
    clock.advance(hours=7, minutes=56)
    assert staff_client.tick() is not None

    new_expiry = staff_client.extend()

    assert new_expiry >= first_expiry
    assert store.load().expires_at == new_expiry


def test_logout_clears_store(staff_client, store, staff_auth, secretary):
    staff_client.login("secretary", "secret123")
    token = staff_client.token

    staff_client.logout()

    assert staff_client.state == AuthState.UNAUTHENTICATED
    assert store.load() is None
    assert staff_auth("validate", token=token).json()["valid"] is False
    with pytest.raises(StaffAuthError):
        staff_client.call("get-session")


def test_server_side_revocation_drops_local_session(staff_client, staff_auth, secretary):
    staff_client.login("secretary", "secret123")
    staff_auth("logout", token=staff_client.token)

    assert staff_client.validate() is False
    assert staff_client.state == AuthState.UNAUTHENTICATED


def test_network_error_is_soft_failure(store, clock):
    store.save(StoredSession(token="abc", expires_at=clock() + timedelta(hours=1)))
    offline = _offline_client(store, clock)

    with pytest.raises(NetworkError):
        offline.validate()
    with pytest.raises(NetworkError):
        offline.extend()

    assert offline.state == AuthState.AUTHENTICATED
    assert store.load(clock()).token == "abc"


def test_client_restores_session_from_store(client, store, clock, secretary):
    first = StaffAuthClient(client, store, clock=clock)
    first.login("secretary", "secret123")

    second = StaffAuthClient(client, store, clock=clock)

    assert second.token == first.token
    assert second.validate() is True


def test_memory_store_purges_expired_session(store, clock):
    store.save(StoredSession(token="abc", expires_at=clock() - timedelta(seconds=1)))

    assert store.load(clock()) is None
    assert store._read() is None


def test_file_store_round_trip(tmp_path, clock):
    path = tmp_path / "state.json"
    store = FileSessionStore(path)
    expires_at = clock() + timedelta(hours=8)

    store.save(StoredSession(token="abc", expires_at=expires_at))

    on_disk = json.loads(path.read_text())
    assert set(on_disk[STAFF_SESSION_STORAGE_KEY]) == {"token", "expiresAt"}
    assert on_disk[STAFF_SESSION_STORAGE_KEY]["expiresAt"].endswith("Z")
    loaded = FileSessionStore(path).load(clock())
    assert loaded.token == "abc"
    assert abs((loaded.expires_at - expires_at).total_seconds()) < 1


def test_file_store_purges_expired_and_keeps_other_keys(tmp_path, clock):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({
        "theme": "dark",
        STAFF_SESSION_STORAGE_KEY: {"token": "abc", "expiresAt": "2000-01-01T00:00:00Z"},
    }))

    assert FileSessionStore(path).load(clock()) is None
    assert json.loads(path.read_text()) == {"theme": "dark"}


def test_file_store_discards_malformed_payload(tmp_path, clock):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({STAFF_SESSION_STORAGE_KEY: {"token": "abc", "expiresAt": "soon"}}))

    assert FileSessionStore(path).load(clock()) is None
    assert STAFF_SESSION_STORAGE_KEY not in json.loads(path.read_text())
