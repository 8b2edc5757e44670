"""
Dashboard blueprint package.

Exposes dashboard_bp: dashboard, global search, notifications, navigation,
approvals and the activity log.
"""

from .routes import dashboard_bp  # noqa: F401
