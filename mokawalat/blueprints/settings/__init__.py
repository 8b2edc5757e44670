"""Settings blueprint package (company profile, users, language)."""

from .routes import settings_bp  # noqa: F401
