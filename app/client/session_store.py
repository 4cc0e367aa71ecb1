"""
Client-side storage for the staff session.

The stored value is ``{"token": ..., "expiresAt": ...}`` under the
``bris_staff_session`` key. A session whose expiry has passed is purged
when it is read, so callers never see an expired token.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from app.core.constants import STAFF_SESSION_STORAGE_KEY
from app.utils.datetime_utils import ensure_utc, iso_8601_utc, now_utc, parse_iso_datetime

logger = logging.getLogger(__name__)


@dataclass
class StoredSession:
    token: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return ensure_utc(self.expires_at) <= (now or now_utc())

    def seconds_remaining(self, now: Optional[datetime] = None) -> int:
        remaining = (ensure_utc(self.expires_at) - (now or now_utc())).total_seconds()
        return max(0, int(remaining))

    def to_dict(self) -> Dict[str, str]:
        return {"token": self.token, "expiresAt": iso_8601_utc(self.expires_at)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["StoredSession"]:
        """Returns None for malformed payloads"""
        token = data.get("token")
        expires_at = data.get("expiresAt")
        if not isinstance(token, str) or not isinstance(expires_at, str) or not token:
            return None
        try:
            return cls(token=token, expires_at=parse_iso_datetime(expires_at))
        except ValueError:
            return None


class SessionStore:
    """Base store. Subclasses implement the raw read/write of one JSON payload."""

    key = STAFF_SESSION_STORAGE_KEY

    def _read(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def _write(self, payload: Optional[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def load(self, now: Optional[datetime] = None) -> Optional[StoredSession]:
        payload = self._read()
        if payload is None:
            return None
        session = StoredSession.from_dict(payload)
        if session is None:
            logger.warning("Discarding malformed stored session")
            self.clear()
            return None
        if session.is_expired(now):
            logger.info("Stored staff session expired; purging")
            self.clear()
            return None
        return session

    def save(self, session: StoredSession) -> None:
        self._write(session.to_dict())

    def clear(self) -> None:
        self._write(None)


class MemorySessionStore(SessionStore):
    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def _read(self) -> Optional[Dict[str, Any]]:
        return self._data.get(self.key)

    def _write(self, payload: Optional[Dict[str, Any]]) -> None:
        if payload is None:
            self._data.pop(self.key, None)
        else:
            self._data[self.key] = dict(payload)


class FileSessionStore(SessionStore):
    """
    JSON file store. The file holds an object keyed by storage key so other
    client state can live alongside the session.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load_file(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read session file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _read(self) -> Optional[Dict[str, Any]]:
        value = self._load_file().get(self.key)
        return value if isinstance(value, dict) else None

    def _write(self, payload: Optional[Dict[str, Any]]) -> None:
        data = self._load_file()
        if payload is None:
            if self.key not in data:
                return
            data.pop(self.key)
        else:
            data[self.key] = payload
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
