"""
Timezone-aware datetime helpers.
- Store and compute in UTC in DB.
- API responses expose datetimes in barangay local time (Asia/Manila, +08:00).
- Control and incident numbers use the local calendar date.
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings

UTC = timezone.utc
LOCAL_TZ = ZoneInfo(settings.TZ)


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC.

    SQLite drops tzinfo on DateTime(timezone=True) columns, so anything read
    back from the database goes through here before comparison.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert to the barangay timezone. Naive datetimes are treated as UTC."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(LOCAL_TZ)


def local_today(at: Optional[datetime] = None) -> date:
    """Calendar date in the barangay timezone."""
    return to_local(at or now_utc()).date()


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 with the local +08:00 offset. Use for API response datetime fields."""
    if dt is None:
        return None
    return to_local(dt).isoformat()


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC. Used for session expiry on the wire."""
    if dt is None:
        return None
    s = ensure_utc(dt).isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (accepting a trailing Z) into aware UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(value))
