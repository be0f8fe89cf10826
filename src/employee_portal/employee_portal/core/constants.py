"""Constants and defaults.

Note: Keep constants here to avoid magic values spread across code.
"""

# Storage keys. The snapshot key carries the format version in its name.
DB_STORAGE_KEY = "employee_portal_db_v1"
LEGACY_ACCOUNTS_KEY = "employees"
SESSION_TOKEN_KEY = "auth_token"
LEGACY_SESSION_KEY = "loggedInEmployee"
PENDING_VERIFICATION_KEY = "unverified_email"

MIN_PASSWORD_LENGTH = 6
DEFAULT_VERIFY_DELAY_SECONDS = 1.2
UNKNOWN_DEPARTMENT = "Unknown"
EMPLOYEE_ID_PREFIX = "EMP-"

SEED_ACCOUNTS = (
    {
        "id": 1,
        "firstName": "Admin",
        "lastName": "User",
        "email": "admin@example.com",
        "password": "admin123",
        "role": "admin",
        "verified": True,
    },
    {
        "id": 2,
        "firstName": "Manager",
        "lastName": "User",
        "email": "manager@example.com",
        "password": "manager123",
        "role": "admin",
        "verified": True,
    },
)

SEED_DEPARTMENTS = (
    {"id": 1, "name": "Engineering", "description": "Software team"},
    {"id": 2, "name": "HR", "description": "Human Resources"},
)
