"""
mokawalat/blueprints/assets/__init__.py

Blueprint package export.

IMPORTANT:
- Must expose assets_bp for app factory registration.
"""

from __future__ import annotations

from .routes import assets_bp  # noqa: F401
