"""
mokawalat/blueprints/hr/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose hr_bp for app factory registration.
- Keep import minimal to avoid side effects.
"""

from __future__ import annotations

from .routes import hr_bp  # noqa: F401
