"""
mokawalat/blueprints/dashboard/routes.py

Cross-cutting pages:
- /dashboard      headline counts, financial summary, recent activity
- /search         global search (see search.py)
- /notifications  live notification feed
- /navigation     sidebar for the current user
- /approvals      pending POs and material requests (admin only)
- /activity       activity log, newest first
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from ...activity import serialize_model
from ...ledger import financial_summary
from ...models import (
    ActivityLogEntry,
    Client,
    Employee,
    InventoryItem,
    MaterialRequest,
    Project,
    PurchaseRequest,
    STOCK_LOW,
    STOCK_OUT,
)
from ...navigation import visible_sections
from ...notifications import collect_notifications
from ...search import global_search
from ...security import admin_required
from ...utils import arg_int, arg_str

dashboard_bp = Blueprint("dashboard", __name__)

ACTIVITY_DEFAULT_LIMIT = 50
ACTIVITY_MAX_LIMIT = 200


def _locale() -> str | None:
    return getattr(current_user, "locale", None)


@dashboard_bp.route("/dashboard")
@login_required
def dashboard():
    recent = ActivityLogEntry.query.order_by(ActivityLogEntry.timestamp.desc()).limit(5).all()
    return jsonify(
        {
            "counts": {
                "projects": Project.query.count(),
                "active_projects": Project.query.filter_by(status="In Progress").count(),
                "employees": Employee.query.filter_by(status="Active").count(),
                "clients": Client.query.count(),
                "low_stock_items": InventoryItem.query.filter(InventoryItem.status.in_([STOCK_LOW, STOCK_OUT])).count(),
                "pending_purchase_orders": PurchaseRequest.query.filter_by(status="Pending").count(),
            },
            "financials": financial_summary(),
            "recent_activity": [serialize_model(e) for e in recent],
        }
    )


@dashboard_bp.route("/search")
@login_required
def search():
    return jsonify({"results": global_search(request.args.get("q", ""))})


@dashboard_bp.route("/notifications")
@login_required
def notifications():
    return jsonify({"notifications": collect_notifications(_locale(), limit=arg_int("limit"))})


@dashboard_bp.route("/navigation")
@login_required
def navigation():
    return jsonify({"sections": visible_sections(current_user, _locale())})


@dashboard_bp.route("/approvals")
@login_required
@admin_required
def approvals():
    """Queue of items awaiting a decision."""
    pending_pos = (
        PurchaseRequest.query.filter_by(status="Pending")
        .order_by(PurchaseRequest.requested_at.desc())
        .all()
    )
    pending_requests = (
        MaterialRequest.query.filter_by(status="Pending")
        .order_by(MaterialRequest.requested_at.desc())
        .all()
    )
    return jsonify(
        {
            "purchase_orders": [serialize_model(po) for po in pending_pos],
            "material_requests": [
                dict(serialize_model(mr), project_name=mr.project.name if mr.project else None)
                for mr in pending_requests
            ],
        }
    )


@dashboard_bp.route("/activity")
@login_required
def activity():
    limit = max(1, min(arg_int("limit", ACTIVITY_DEFAULT_LIMIT), ACTIVITY_MAX_LIMIT))

    q = ActivityLogEntry.query
    activity_type = arg_str("type")
    if activity_type:
        q = q.filter(ActivityLogEntry.type == activity_type)

    entries = q.order_by(ActivityLogEntry.timestamp.desc(), ActivityLogEntry.id.desc()).limit(limit).all()
    return jsonify({"activity": [serialize_model(e) for e in entries]})
