"""
mokawalat/blueprints/invoices/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose invoices_bp for app factory registration.
- Keep import minimal to avoid side effects.
"""

from __future__ import annotations

from .routes import invoices_bp  # noqa: F401
