import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Where the key/value store lives: "file" (JSON file), "mysql" (kv_store table) or "memory"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file")
STORAGE_PATH = os.getenv("STORAGE_PATH", "instance/local_storage.json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "employee_portal"),
}

# Visible delay of the simulated email verification
VERIFY_DELAY_SECONDS = float(os.getenv("VERIFY_DELAY_SECONDS", "1.2"))

DEBUG = True

# If enabled (mysql backend only), the kv_store table is created on startup
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
