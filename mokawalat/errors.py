"""
Domain errors raised by services and translated to JSON responses by the blueprints.
"""

from __future__ import annotations


class ERPError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ERPError):
    status_code = 404


class BusinessRuleError(ERPError):
    """Invalid status transition, insufficient stock, blocked delete, ..."""

    status_code = 409


class FlowError(ERPError):
    """An AI flow could not produce a result."""

    status_code = 502
