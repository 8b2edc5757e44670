"""
mokawalat/blueprints/employees/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose employees_bp for app factory registration.
- Keep import minimal to avoid side effects.
"""

from __future__ import annotations

from .routes import employees_bp  # noqa: F401
