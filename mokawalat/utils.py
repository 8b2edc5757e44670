"""
Utility functions shared across the blueprints. This includes:
- Response helpers: the two JSON envelopes every route returns.
- Request helpers: optional filters read from the query string.
- Lookup helpers: fetch a referenced row or raise NotFoundError.
"""

from __future__ import annotations

import logging
from typing import Any, Type

from flask import jsonify, request

from .errors import ERPError, FlowError, NotFoundError
from .extensions import db

logger = logging.getLogger(__name__)

SERVER_ERROR = {"_server": ["An unexpected error occurred."]}


# ---------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------
def mutation_response(message: str, errors: dict | None = None, status: int = 200, **extra: Any):
    """Create/update result: {"message", "errors"} plus optional extra keys (e.g. "id")."""
    body = {"message": message, "errors": errors}
    body.update(extra)
    return jsonify(body), status


def invalid_form(form, message: str = "Invalid data provided. Please check the form."):
    return mutation_response(message, errors=form.errors, status=400)


def status_response(success: bool, message: str, status: int | None = None, **extra: Any):
    """Status change / delete result: {"success", "message"}."""
    body = {"success": success, "message": message}
    body.update(extra)
    if status is None:
        status = 200 if success else 400
    return jsonify(body), status


def error_status_response(exc: ERPError):
    return status_response(False, exc.message, status=exc.status_code)


def flow_response(run, success_message: str = "Summary generated."):
    """Run an AI flow; FlowError becomes {"error": true, "message": ...}."""
    try:
        result = run()
    except FlowError as exc:
        return jsonify({"error": True, "message": exc.message, "data": None}), exc.status_code
    return jsonify({"error": False, "message": success_message, "data": result.model_dump()}), 200


def server_failure(message: str, *, envelope: str = "mutation"):
    """
    Roll back the session and return the generic failure response.

    Must be called from inside an `except` block so the traceback is logged.
    """
    db.session.rollback()
    logger.exception(message)
    if envelope == "status":
        return status_response(False, message, status=500)
    return mutation_response(message, errors=SERVER_ERROR, status=500)


# ---------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------
def _parse_optional_int(value: str | None) -> int | None:
    """Parse optional int from form/query."""
    if value is None:
        return None
    raw = str(value).strip()
    if raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def arg_int(name: str, default: int | None = None) -> int | None:
    value = _parse_optional_int(request.args.get(name))
    return default if value is None else value


def arg_str(name: str) -> str | None:
    return (request.args.get(name) or "").strip() or None


# ---------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------
def get_or_raise(model: Type[Any], object_id: int | None, label: str):
    """Return model row by id, or raise NotFoundError('<label> not found.')."""
    obj = db.session.get(model, object_id) if object_id is not None else None
    if obj is None:
        raise NotFoundError(f"{label} not found.")
    return obj
