"""
Python client for the staff-auth endpoint
"""
from app.client.session_store import FileSessionStore, MemorySessionStore, SessionStore, StoredSession
from app.client.staff_client import AuthState, NetworkError, StaffAuthClient, StaffAuthError

__all__ = [
    "AuthState",
    "FileSessionStore",
    "MemorySessionStore",
    "NetworkError",
    "SessionStore",
    "StaffAuthClient",
    "StaffAuthError",
    "StoredSession",
]
