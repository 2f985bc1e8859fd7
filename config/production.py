import os

from config import cloudinary_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

DEFAULT_DEPARTMENT = os.getenv("DEFAULT_DEPARTMENT", "operations")

PHOTO_UPLOAD_TIMEOUT_SECONDS = float(os.getenv("PHOTO_UPLOAD_TIMEOUT_SECONDS", "10"))
CLOUDINARY = cloudinary_from_env()
