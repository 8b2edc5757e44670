"""
mokawalat/blueprints/procurement/routes.py

Purchase request / purchase order routes

Workflow:
    Pending -> Approved | Rejected
    Approved -> Ordered        (records an Expense against the project)
    Ordered -> Received        (adds the quantity to inventory)

IMPORTANT:
- Status changes require manager or admin.
- Ordering posts to the oldest bank account and fails if there is none.
- A purchase order is expensed at most once.
- Budget alert webhooks are sent only after the commit succeeds.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...alerts import send_budget_alert_webhooks
from ...errors import BusinessRuleError, ERPError
from ...extensions import db
from ...forms import PurchaseRequestForm, PurchaseStatusForm, bind_form
from ...ledger import first_account, record_transaction
from ...models import InventoryItem, Project, PurchaseRequest, Supplier, Transaction, TX_EXPENSE
from ...security import manager_required
from ...utils import (
    arg_str,
    error_status_response,
    invalid_form,
    mutation_response,
    server_failure,
    status_response,
)

procurement_bp = Blueprint("procurement", __name__, url_prefix="/procurement")

ALLOWED_TRANSITIONS = {
    "Pending": ("Approved", "Rejected"),
    "Approved": ("Ordered",),
}


def _request_dict(pr: PurchaseRequest) -> dict:
    data = serialize_model(pr)
    data["supplier_name"] = pr.supplier.name if pr.supplier else None
    data["project_name"] = pr.project.name if pr.project else None
    return data


def _resolve_references(form: PurchaseRequestForm) -> tuple[dict | None, tuple]:
    errors = {}
    item = db.session.get(InventoryItem, form.item_id.data)
    if item is None:
        errors["item_id"] = ["Invalid item selected."]
    supplier = db.session.get(Supplier, form.supplier_id.data)
    if supplier is None:
        errors["supplier_id"] = ["Invalid supplier selected."]
    project = db.session.get(Project, form.project_id.data)
    if project is None:
        errors["project_id"] = ["Invalid project selected."]
    return (errors or None), (item, supplier, project)


# ---------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------
@procurement_bp.route("", methods=["GET"])
@login_required
def list_purchase_requests():
    q = PurchaseRequest.query
    status = arg_str("status")
    if status:
        q = q.filter(PurchaseRequest.status == status)
    rows = q.order_by(PurchaseRequest.requested_at.desc(), PurchaseRequest.id.desc()).all()
    return jsonify({"purchase_requests": [_request_dict(pr) for pr in rows]})


@procurement_bp.route("", methods=["POST"])
@login_required
def create_purchase_request():
    form = bind_form(PurchaseRequestForm)
    if not form.validate():
        return invalid_form(form)

    errors, (item, supplier, project) = _resolve_references(form)
    if errors:
        return mutation_response("Invalid data provided. Please check the form.", errors=errors, status=400)

    pr = PurchaseRequest(
        item_id=item.id,
        item_name=item.name,
        supplier_id=supplier.id,
        project_id=project.id,
        quantity=form.quantity.data,
        unit_cost=form.unit_cost.data,
        status="Pending",
    )
    pr.recalc_total()

    try:
        db.session.add(pr)
        db.session.flush()
        log_activity(
            f"New purchase request created for {pr.quantity} x {pr.item_name}",
            "PO_CREATED",
            "/procurement",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to create purchase request.")

    return mutation_response("Purchase request created successfully.", status=201, id=pr.id)


@procurement_bp.route("/<int:request_id>", methods=["GET"])
@login_required
def purchase_request_detail(request_id: int):
    pr = db.get_or_404(PurchaseRequest, request_id)
    return jsonify(_request_dict(pr))


@procurement_bp.route("/<int:request_id>", methods=["PUT", "POST"])
@login_required
def update_purchase_request(request_id: int):
    pr = db.get_or_404(PurchaseRequest, request_id)
    if pr.status != "Pending":
        return mutation_response(
            "Only pending purchase requests can be edited.",
            errors={"_server": ["Request is no longer pending."]},
            status=409,
        )

    form = bind_form(PurchaseRequestForm)
    if not form.validate():
        return invalid_form(form)

    errors, (item, supplier, project) = _resolve_references(form)
    if errors:
        return mutation_response("Invalid data provided. Please check the form.", errors=errors, status=400)

    try:
        pr.item_id = item.id
        pr.item_name = item.name
        pr.supplier_id = supplier.id
        pr.project_id = project.id
        pr.quantity = form.quantity.data
        pr.unit_cost = form.unit_cost.data
        pr.recalc_total()
        db.session.commit()
    except Exception:
        return server_failure("Failed to update purchase request.")

    return mutation_response("Purchase request updated successfully.")


@procurement_bp.route("/<int:request_id>", methods=["DELETE"])
@login_required
def delete_purchase_request(request_id: int):
    pr = db.get_or_404(PurchaseRequest, request_id)
    item_name = pr.item_name
    try:
        db.session.delete(pr)
        log_activity(f"Purchase request for {item_name} deleted", "PO_DELETED", "/procurement")
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete purchase request.", envelope="status")
    return status_response(True, "Purchase request deleted successfully.")


# ---------------------------------------------------------------------
# Status workflow
# ---------------------------------------------------------------------
def _record_order_expense(pr: PurchaseRequest) -> list:
    """Expense the order once. Returns budget alert payloads."""
    already = db.session.query(
        Transaction.query.filter(Transaction.purchase_order_id == pr.id).exists()
    ).scalar()
    if already:
        return []

    account = first_account()
    _, payloads = record_transaction(
        description=f"Purchase of {pr.quantity} x {pr.item_name}",
        amount=pr.total_cost,
        type=TX_EXPENSE,
        account_id=account.id,
        project=pr.project,
        supplier_id=pr.supplier_id,
        purchase_order_id=pr.id,
    )
    return payloads


@procurement_bp.route("/<int:request_id>/status", methods=["POST", "PUT"])
@login_required
@manager_required
def update_purchase_status(request_id: int):
    pr = db.get_or_404(PurchaseRequest, request_id)

    form = bind_form(PurchaseStatusForm)
    if not form.validate():
        return status_response(False, "Invalid status.")
    new_status = form.status.data

    if new_status not in ALLOWED_TRANSITIONS.get(pr.status, ()):
        return status_response(False, f"Cannot change status from '{pr.status}' to '{new_status}'.", status=409)

    payloads = []
    try:
        if new_status == "Ordered":
            payloads = _record_order_expense(pr)
        pr.status = new_status
    except ERPError as exc:
        db.session.rollback()
        return error_status_response(exc)

    try:
        log_activity(
            f"Purchase order for {pr.item_name} status changed to {new_status}",
            "PO_STATUS_CHANGED",
            "/procurement",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to update status.", envelope="status")

    send_budget_alert_webhooks(payloads)
    return status_response(True, f"Purchase request status updated to {new_status}.")


@procurement_bp.route("/<int:request_id>/receive", methods=["POST"])
@login_required
def receive_order(request_id: int):
    pr = db.get_or_404(PurchaseRequest, request_id)

    try:
        if pr.status != "Ordered":
            raise BusinessRuleError("Only 'Ordered' purchase orders can be marked as received.")
        item = pr.item
        if item is None:
            raise BusinessRuleError("The inventory item for this order no longer exists.")
        item.apply_adjustment(pr.quantity)
        pr.status = "Received"
    except ERPError as exc:
        db.session.rollback()
        return error_status_response(exc)

    try:
        log_activity(
            f'Received {pr.quantity} x "{pr.item_name}" into inventory',
            "PO_RECEIVED",
            "/inventory",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to receive order.", envelope="status")

    return status_response(True, "Order received and inventory updated.")
