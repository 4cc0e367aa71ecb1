"""
Constants shared across the service
"""

SERVICE_NAME = "barangay-services-backend"

# Client-side storage key for the persisted staff session
STAFF_SESSION_STORAGE_KEY = "bris_staff_session"

# Audit log vocabulary
AUDIT_ACTION_CREATE = "create"
AUDIT_ACTION_UPDATE = "update"
AUDIT_ACTION_APPROVE = "approve"
AUDIT_ACTION_REJECT = "reject"
AUDIT_ACTION_LOGIN = "login"
AUDIT_ACTION_LOGOUT = "logout"

ENTITY_CERTIFICATE_REQUEST = "certificate_request"
ENTITY_STAFF_USER = "staff_user"
ENTITY_INCIDENT = "incident"

PERFORMER_STAFF = "staff"
PERFORMER_ADMIN = "admin"
PERFORMER_RESIDENT = "resident"
PERFORMER_SYSTEM = "system"

# Resident submission rules
CONTACT_NUMBER_PATTERN = r"^09\d{9}$"
HOUSEHOLD_CODE_MIN_LENGTH = 3
HOUSEHOLD_CODE_MAX_LENGTH = 5

CONTROL_NUMBER_PREFIX = "CERT"
INCIDENT_NUMBER_PREFIX = "INC"
