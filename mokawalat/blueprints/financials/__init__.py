"""
mokawalat/blueprints/financials/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose financials_bp for app factory registration.
- Keep import minimal to avoid side effects.
"""

from __future__ import annotations

from .routes import financials_bp  # noqa: F401
