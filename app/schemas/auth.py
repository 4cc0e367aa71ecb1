"""
Staff authentication schemas

The staff-auth endpoint speaks camelCase on the wire (``expiresAt``,
``fullName``, ``statusFilter``); snake_case is accepted on input too.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from app.utils.datetime_utils import iso_8601_utc


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class StaffAuthRequest(CamelModel):
    """Body of POST /staff-auth: an action name, the session token, and the action payload"""
    action: str = Field(default="login", description="login, logout, validate, extend, get-session, ...")
    token: Optional[str] = None

    # login
    username: Optional[str] = None
    password: Optional[str] = None

    # certificate actions
    status_filter: Optional[str] = None
    control_number: Optional[str] = None
    control_numbers: Optional[List[str]] = None
    new_status: Optional[str] = None
    notes: Optional[str] = None

    # audit log listing
    entity_filter: Optional[str] = None
    action_filter: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)

    # account actions
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    staff_id: Optional[int] = None
    active: Optional[bool] = None


class StaffUserOut(CamelModel):
    id: int
    username: str
    full_name: str
    role: str


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    user: StaffUserOut
    expires_at: datetime

    @field_serializer("expires_at")
    def _ser_expires_at(self, dt):
        return iso_8601_utc(dt)


class ValidateResponse(CamelModel):
    valid: bool
    user: Optional[StaffUserOut] = None


class ExtendResponse(CamelModel):
    success: bool = True
    expires_at: datetime

    @field_serializer("expires_at")
    def _ser_expires_at(self, dt):
        return iso_8601_utc(dt)


class SessionInfoResponse(CamelModel):
    valid: bool = True
    user: StaffUserOut
    expires_at: datetime
    expires_in_seconds: int
    expiring_soon: bool

    @field_serializer("expires_at")
    def _ser_expires_at(self, dt):
        return iso_8601_utc(dt)


class PermissionsResponse(CamelModel):
    role: str
    role_display_name: str
    features: List[str]
    can_access_admin_section: bool
    is_admin_role: bool
