import os

from config import cloudinary_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed departments/offices on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Department used when a user's department has no timing row.
DEFAULT_DEPARTMENT = os.getenv("DEFAULT_DEPARTMENT", "operations")

PHOTO_UPLOAD_TIMEOUT_SECONDS = float(os.getenv("PHOTO_UPLOAD_TIMEOUT_SECONDS", "10"))
CLOUDINARY = cloudinary_from_env()
