"""
Role-based access control

Static role -> feature table. Every lookup fails closed: an unknown role or
an unknown feature never grants access.
"""
import enum
from typing import Dict, FrozenSet, Optional, Union

from app.models.staff_user import StaffRole


class FeatureKey(str, enum.Enum):
    STAFF_MANAGEMENT = "staff_management"
    AUDIT_LOGS = "audit_logs"
    MONITORING_REPORTS = "monitoring_reports"
    RESIDENT_APPROVAL = "resident_approval"
    ECOLOGICAL_SUBMISSIONS = "ecological_submissions"
    NAME_CHANGE_REQUESTS = "name_change_requests"
    HOUSEHOLD_LINK_REQUESTS = "household_link_requests"
    MANAGE_RESIDENTS = "manage_residents"
    MANAGE_HOUSEHOLDS = "manage_households"
    ANNOUNCEMENTS = "announcements"
    VIEW_REPORTS = "view_reports"
    CERTIFICATE_REQUESTS = "certificate_requests"
    ECOLOGICAL_PROFILE = "ecological_profile"
    CREATE_CERTIFICATE = "create_certificate"
    INCIDENTS = "incidents"
    SETTINGS = "settings"


_ALL_ROLES = frozenset(StaffRole)
_MANAGEMENT_ROLES = frozenset({
    StaffRole.ADMIN,
    StaffRole.BARANGAY_CAPTAIN,
    StaffRole.BARANGAY_OFFICIAL,
    StaffRole.SECRETARY,
})

ROLE_PERMISSIONS: Dict[FeatureKey, FrozenSet[StaffRole]] = {
    # Admin-level features
    FeatureKey.STAFF_MANAGEMENT: frozenset({StaffRole.ADMIN, StaffRole.BARANGAY_CAPTAIN}),
    FeatureKey.AUDIT_LOGS: frozenset({StaffRole.ADMIN, StaffRole.BARANGAY_CAPTAIN}),
    FeatureKey.MONITORING_REPORTS: frozenset({StaffRole.ADMIN}),

    # Management features
    FeatureKey.RESIDENT_APPROVAL: frozenset({
        StaffRole.ADMIN, StaffRole.BARANGAY_CAPTAIN, StaffRole.BARANGAY_OFFICIAL,
    }),
    FeatureKey.ECOLOGICAL_SUBMISSIONS: _MANAGEMENT_ROLES,
    FeatureKey.NAME_CHANGE_REQUESTS: _MANAGEMENT_ROLES,
    FeatureKey.HOUSEHOLD_LINK_REQUESTS: _MANAGEMENT_ROLES,
    FeatureKey.MANAGE_RESIDENTS: _MANAGEMENT_ROLES,
    FeatureKey.MANAGE_HOUSEHOLDS: _MANAGEMENT_ROLES,
    FeatureKey.ANNOUNCEMENTS: _MANAGEMENT_ROLES,

    # Common features
    FeatureKey.VIEW_REPORTS: _ALL_ROLES,
    FeatureKey.CERTIFICATE_REQUESTS: _ALL_ROLES,
    FeatureKey.ECOLOGICAL_PROFILE: _ALL_ROLES,
    FeatureKey.CREATE_CERTIFICATE: _ALL_ROLES,
    FeatureKey.INCIDENTS: _ALL_ROLES,
    FeatureKey.SETTINGS: _ALL_ROLES,
}

# Any one of these opens the admin section of the dashboard
ADMIN_SECTION_FEATURES = (
    FeatureKey.STAFF_MANAGEMENT,
    FeatureKey.AUDIT_LOGS,
    FeatureKey.RESIDENT_APPROVAL,
    FeatureKey.ECOLOGICAL_SUBMISSIONS,
    FeatureKey.NAME_CHANGE_REQUESTS,
    FeatureKey.HOUSEHOLD_LINK_REQUESTS,
    FeatureKey.MONITORING_REPORTS,
)

ROLE_DISPLAY_NAMES: Dict[StaffRole, str] = {
    StaffRole.ADMIN: "Administrator",
    StaffRole.BARANGAY_CAPTAIN: "Barangay Captain",
    StaffRole.BARANGAY_OFFICIAL: "Barangay Official",
    StaffRole.SECRETARY: "Secretary",
    StaffRole.SK_CHAIRMAN: "SK Chairman",
}


def parse_role(value: Union[StaffRole, str, None]) -> Optional[StaffRole]:
    """Convert untyped role data to a StaffRole, or None when unknown"""
    if isinstance(value, StaffRole):
        return value
    if not isinstance(value, str):
        return None
    try:
        return StaffRole(value.strip().lower())
    except ValueError:
        return None


def parse_feature(value: Union[FeatureKey, str, None]) -> Optional[FeatureKey]:
    """Convert untyped feature data to a FeatureKey, or None when unknown"""
    if isinstance(value, FeatureKey):
        return value
    if not isinstance(value, str):
        return None
    try:
        return FeatureKey(value.strip().lower())
    except ValueError:
        return None


def has_permission(role: Union[StaffRole, str, None], feature: Union[FeatureKey, str, None]) -> bool:
    parsed_role = parse_role(role)
    parsed_feature = parse_feature(feature)
    if parsed_role is None or parsed_feature is None:
        return False
    return parsed_role in ROLE_PERMISSIONS.get(parsed_feature, frozenset())


def get_permitted_features(role: Union[StaffRole, str, None]) -> FrozenSet[FeatureKey]:
    parsed_role = parse_role(role)
    if parsed_role is None:
        return frozenset()
    return frozenset(feature for feature, roles in ROLE_PERMISSIONS.items() if parsed_role in roles)


def can_access_admin_section(role: Union[StaffRole, str, None]) -> bool:
    return any(has_permission(role, feature) for feature in ADMIN_SECTION_FEATURES)


def is_admin_role(role: Union[StaffRole, str, None]) -> bool:
    """Admin-level roles can manage staff accounts"""
    return parse_role(role) in (StaffRole.ADMIN, StaffRole.BARANGAY_CAPTAIN)


def get_role_display_name(role: Union[StaffRole, str, None]) -> str:
    parsed_role = parse_role(role)
    if parsed_role is None:
        return str(role) if role else "Unknown"
    return ROLE_DISPLAY_NAMES[parsed_role]
