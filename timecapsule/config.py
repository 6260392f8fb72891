# timecapsule/config.py
import os
from dotenv import load_dotenv

load_dotenv()

def _as_bool(val: str | None, default=False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}

class Config:
    # --- Core ---
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    APP_VERSION = os.getenv("APP_VERSION")

    # DB
    SQLALCHEMY_DATABASE_URI = (
        os.getenv("SQLALCHEMY_DATABASE_URI")
        or os.getenv("DATABASE_URL")
        or "sqlite:///timecapsule.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_DB = _as_bool(os.getenv("AUTO_CREATE_DB", "1"))

    # --- Uploads ---
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", str(20 * 1024 * 1024)))  # 20MB per file
    MAX_FILES_PER_CAPSULE = int(os.getenv("MAX_FILES_PER_CAPSULE", "10"))
    MAX_CONTENT_LENGTH = int(os.getenv(
        "MAX_CONTENT_LENGTH",
        str(MAX_FILES_PER_CAPSULE * MAX_FILE_SIZE + 1024 * 1024),
    ))
    ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "mp4", "avi"}

    # --- Mail ---
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.example.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _as_bool(os.getenv("MAIL_USE_TLS", "1"))
    MAIL_USE_SSL = _as_bool(os.getenv("MAIL_USE_SSL", "0"))  # don't enable together with TLS
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "TimeCapsule <noreply@timecapsule.app>")
    MAIL_SUPPRESS_SEND = _as_bool(os.getenv("MAIL_SUPPRESS_SEND", "0"))

    # --- Links in notification emails ---
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # --- Notification sweep ---
    SCHEDULER_ENABLED = _as_bool(os.getenv("SCHEDULER_ENABLED", "1"))
    NOTIFICATION_SWEEP_MINUTES = int(os.getenv("NOTIFICATION_SWEEP_MINUTES", "60"))

    # --- API tokens ---
    API_TOKEN_SALT = os.getenv("API_TOKEN_SALT", "api-token")
    API_TOKEN_MAX_AGE = int(os.getenv("API_TOKEN_MAX_AGE", str(7 * 24 * 60 * 60)))

    # --- Logging ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_FILENAME = os.getenv("LOG_FILENAME", "timecapsule.log")
    LOG_JSON = _as_bool(os.getenv("LOG_JSON", "0"))

    # --- Sentry ---
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0"))
