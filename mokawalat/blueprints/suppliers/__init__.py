"""
mokawalat/blueprints/suppliers/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose suppliers_bp for app factory registration.
- Keep import minimal to avoid side effects.
"""

from __future__ import annotations

from .routes import suppliers_bp  # noqa: F401
