"""
Application configuration.
This module defines the configuration settings for the Flask application, including database connection, secret key,
AI model credentials, budget alert webhooks and upload storage. It uses environment variables for sensitive information
and defaults for development. In production, make sure to set the appropriate environment variables and secure the
secret key.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def _csv(value: str) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


class Config:
    """Base configuration shared by all environments."""

    # IMPORTANT: change this in production
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-change-me-please")

    # Database: SQLite for development (simple file in project folder)
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'mokawalat.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CSRF protection for forms
    WTF_CSRF_ENABLED = os.environ.get("WTF_CSRF_ENABLED", "1") == "1"

    # App UI name
    APP_NAME = "Mokawalat ERP"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Uploads (resumes, certificates, logos, photos, contracts)
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", str(BASE_DIR / "uploads"))
    MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))

    # Generative model used by the AI flows
    GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")
    AI_MODEL = os.environ.get("AI_MODEL", "gemini-2.5-flash")
    AI_TEMPERATURE = float(os.environ.get("AI_TEMPERATURE", "0.2"))

    # Budget alerts
    BUDGET_ALERT_THRESHOLDS = [int(t) for t in _csv(os.environ.get("BUDGET_ALERT_THRESHOLDS", "75,90,100"))]
    WEBHOOK_BUDGET_ALERT_URLS = _csv(os.environ.get("WEBHOOK_BUDGET_ALERT_URLS", ""))
    WEBHOOK_TIMEOUT_SECONDS = float(os.environ.get("WEBHOOK_TIMEOUT_SECONDS", "5"))

    # Profiles
    BOOTSTRAP_ADMIN_EMAIL = os.environ.get("BOOTSTRAP_ADMIN_EMAIL", "admin@mokawalat.com")
    DEFAULT_LOCALE = os.environ.get("DEFAULT_LOCALE", "en")
    PASSWORD_RESET_MAX_AGE = int(os.environ.get("PASSWORD_RESET_MAX_AGE", 3600))


class TestConfig(Config):
    """In-memory database, no CSRF, no outbound calls."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    GOOGLE_API_KEY = ""
    WEBHOOK_BUDGET_ALERT_URLS = []
    LOG_LEVEL = "WARNING"
