import os

SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"
STORAGE_PATH = ""

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "employee_portal_test"),
}

VERIFY_DELAY_SECONDS = 0.0

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
