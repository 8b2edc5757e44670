"""ISO 9001 compliance assistant blueprint."""

from .routes import compliance_bp  # noqa: F401
