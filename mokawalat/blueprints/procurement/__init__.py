"""
mokawalat/blueprints/procurement/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose procurement_bp for app factory registration.
- Keep import minimal to avoid side effects.
"""

from __future__ import annotations

from .routes import procurement_bp  # noqa: F401
