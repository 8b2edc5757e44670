"""
Material request decisions.

Requests are raised from a project (see projects blueprint); this blueprint
lists them and records the approve/reject decision.

Approving moves stock out of inventory; the request and the item are
updated in one commit.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...errors import BusinessRuleError, ERPError
from ...extensions import db
from ...forms import MaterialRequestStatusForm, bind_form
from ...models import InventoryItem, MaterialRequest
from ...security import manager_required
from ...utils import arg_str, error_status_response, get_or_raise, server_failure, status_response

material_requests_bp = Blueprint("material_requests", __name__, url_prefix="/material-requests")


@material_requests_bp.route("", methods=["GET"])
@login_required
def list_material_requests():
    q = MaterialRequest.query
    status = arg_str("status")
    if status:
        q = q.filter(MaterialRequest.status == status)
    rows = q.order_by(MaterialRequest.requested_at.desc(), MaterialRequest.id.desc()).all()
    return jsonify(
        {
            "material_requests": [
                dict(serialize_model(r), project_name=r.project.name if r.project else None) for r in rows
            ]
        }
    )


def _approve(material_request: MaterialRequest) -> None:
    item = get_or_raise(InventoryItem, material_request.item_id, "Inventory item")
    available = item.quantity or 0
    if available - material_request.quantity < 0:
        raise BusinessRuleError(
            f"Insufficient stock for {item.name}. Required: {material_request.quantity}, Available: {available}."
        )

    item.apply_adjustment(-material_request.quantity)
    material_request.status = "Approved"


@material_requests_bp.route("/<int:request_id>/status", methods=["POST", "PUT"])
@login_required
@manager_required
def update_material_request_status(request_id: int):
    material_request = db.get_or_404(MaterialRequest, request_id)

    form = bind_form(MaterialRequestStatusForm)
    if not form.validate():
        return status_response(False, "Invalid status.")
    new_status = form.status.data

    try:
        if material_request.status != "Pending":
            raise BusinessRuleError("This request has already been actioned.")
        if new_status == "Approved":
            _approve(material_request)
        else:
            material_request.status = "Rejected"
    except ERPError as exc:
        db.session.rollback()
        return error_status_response(exc)

    try:
        log_activity(
            f'Material request for "{material_request.item_name}" was {new_status.lower()}',
            "MATERIAL_REQUEST_APPROVED" if new_status == "Approved" else "MATERIAL_REQUEST_REJECTED",
            f"/projects/{material_request.project_id}",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to update request status.", envelope="status")

    return status_response(True, f"Request has been {new_status.lower()}.")
