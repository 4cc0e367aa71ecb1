"""
Staff auth client

Drives the client side of a staff session against ``POST /api/v1/staff-auth``:

    Unauthenticated -> Authenticated(expiresAt) -> Extended | Expired | LoggedOut

The stored expiry is only advisory; the server re-checks the token on every
privileged call. Transport failures raise NetworkError and never clear the
stored session, so the caller can retry.
"""
import enum
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic.alias_generators import to_camel

from app.client.session_store import SessionStore, StoredSession
from app.utils.datetime_utils import now_utc, parse_iso_datetime

logger = logging.getLogger(__name__)

SESSION_EXPIRED_NOTICE = "Your session has expired. Please log in again."
SESSION_EXPIRING_NOTICE = "Your session will expire in {minutes} minute(s). Extend it to stay signed in."


class AuthState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class StaffAuthError(Exception):
    """Error body returned by the server"""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code}: {message}")


class NetworkError(Exception):
    """The request never got a response; the stored session is left as is."""


class StaffAuthClient:
    def __init__(
        self,
        http: httpx.Client,
        store: SessionStore,
        endpoint: str = "/api/v1/staff-auth",
        warning_minutes: int = 5,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.http = http
        self.store = store
        self.endpoint = endpoint
        self.warning_window = timedelta(minutes=warning_minutes)
        self.clock = clock
        self.user: Optional[Dict[str, Any]] = None
        self._session: Optional[StoredSession] = store.load(clock())
        self._warned = False

    # ---------- state ----------

    @property
    def state(self) -> AuthState:
        self.tick()
        return AuthState.AUTHENTICATED if self._session else AuthState.UNAUTHENTICATED

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._session.expires_at if self._session else None

    def expiring_soon(self, now: Optional[datetime] = None) -> bool:
        if self._session is None:
            return False
        now = now or self.clock()
        return not self._session.is_expired(now) and self._session.expires_at - now <= self.warning_window

    def tick(self, now: Optional[datetime] = None) -> Optional[str]:
        """
        Re-check the stored expiry. Returns a notice for the user when the
        session just expired or is about to, otherwise None.
        """
        if self._session is None:
            return None
        now = now or self.clock()
        if self._session.is_expired(now):
            logger.info("Staff session expired locally")
            self._drop_session()
            return SESSION_EXPIRED_NOTICE
        if self.expiring_soon(now) and not self._warned:
            self._warned = True
            minutes = max(1, self._session.seconds_remaining(now) // 60)
            return SESSION_EXPIRING_NOTICE.format(minutes=minutes)
        return None

    def _set_session(self, token: str, expires_at: str) -> None:
        self._session = StoredSession(token=token, expires_at=parse_iso_datetime(expires_at))
        self._warned = False
        self.store.save(self._session)

    def _drop_session(self) -> None:
        self._session = None
        self.user = None
        self._warned = False
        self.store.clear()

    # ---------- transport ----------

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        try:
            return self.http.post(self.endpoint, json=payload)
        except httpx.TransportError as e:
            logger.warning("staff-auth request failed: %s", e)
            raise NetworkError(str(e)) from e

    @staticmethod
    def _error_from(response: httpx.Response) -> StaffAuthError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        code = body.get("code") or "HTTP_ERROR"
        message = body.get("detail") or body.get("error") or response.text or "Request failed"
        return StaffAuthError(code, str(message), response.status_code)

    def _send(self, action: str, **payload: Any) -> Dict[str, Any]:
        body = {"action": action}
        body.update({to_camel(k): v for k, v in payload.items() if v is not None})
        response = self._post(body)
        if response.status_code >= 400:
            error = self._error_from(response)
            if error.code == "SESSION_INVALID":
                self._drop_session()
            raise error
        return response.json()

    # ---------- actions ----------

    def login(self, username: str, password: str) -> Dict[str, Any]:
        data = self._send("login", username=username, password=password)
        self._set_session(data["token"], data["expiresAt"])
        self.user = data["user"]
        return self.user

    def validate(self) -> bool:
        """Ask the server whether the stored token is still good"""
        self.tick()
        if self._session is None:
            return False
        try:
            data = self._send("validate", token=self._session.token)
        except StaffAuthError as e:
            if e.status_code == 401:
                self._drop_session()
                return False
            raise
        self.user = data.get("user")
        return bool(data.get("valid"))

    def extend(self) -> datetime:
        if self._session is None:
            raise StaffAuthError("SESSION_INVALID", "No active session")
        data = self._send("extend", token=self._session.token)
        self._set_session(self._session.token, data["expiresAt"])
        return self._session.expires_at

    def logout(self) -> None:
        """Clear the local session and revoke it server-side"""
        if self._session is None:
            return
        token = self._session.token
        self._drop_session()
        self._send("logout", token=token)

    def call(self, action: str, **payload: Any) -> Dict[str, Any]:
        """Invoke a privileged action with the current token"""
        if self._session is None:
            raise StaffAuthError("SESSION_INVALID", "Not logged in")
        return self._send(action, token=self._session.token, **payload)
