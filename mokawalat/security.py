"""
mokawalat/security.py

Access control helpers for Mokawalat ERP.

Key rules:
- Navigation hides admin entries, but every route checks the role again.
- Roles come from the profile (User.role): admin / manager / user.
- Admin-only pages (company settings, users, payroll, approvals):
  - GET by a non-admin redirects to the dashboard.
  - Mutations by a non-admin get 403.

IMPORTANT:
- functools.wraps keeps endpoint names unique per view.
- Decorators go BELOW @login_required so anonymous users get 401 first.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import jsonify, redirect, request, url_for
from flask_login import current_user

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def _forbidden():
    """Consistent JSON 403."""
    return jsonify({"success": False, "message": "You do not have permission to perform this action."}), 403


def is_admin() -> bool:
    """Signed in with the admin role."""
    return bool(current_user.is_authenticated and getattr(current_user, "is_admin", False))


def is_manager_or_admin() -> bool:
    if not current_user.is_authenticated:
        return False
    can_manage = getattr(current_user, "can_manage", None)
    return bool(callable(can_manage) and can_manage())


def admin_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator: admin-only. Non-admin GET is sent back to the dashboard."""
    @wraps(view_func)
    def wrapper(*args: Any, **kwargs: Any):
        if not is_admin():
            if request.method not in MUTATING_METHODS:
                return redirect(url_for("dashboard.dashboard"))
            return _forbidden()
        return view_func(*args, **kwargs)

    return wrapper


def manager_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator: manager/admin.

    For approval-style actions (PO status changes, material request decisions).
    """
    @wraps(view_func)
    def wrapper(*args: Any, **kwargs: Any):
        if not is_manager_or_admin():
            return _forbidden()
        return view_func(*args, **kwargs)

    return wrapper
