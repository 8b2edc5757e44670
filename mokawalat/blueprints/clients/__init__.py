"""
mokawalat/blueprints/clients/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose clients_bp for app factory registration.
- Keep import minimal to avoid side effects.
"""

from __future__ import annotations

from .routes import clients_bp  # noqa: F401
