"""
Supplier routes: directory CRUD, performance evaluation, contract documents
and the AI performance summary.

Suppliers with purchase requests on record cannot be deleted.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...ai import flows
from ...extensions import db
from ...forms import ContractForm, EvaluationForm, SupplierForm, bind_form
from ...models import Supplier, SupplierContract
from ...storage import attach_upload, delete_upload, discard_upload
from ...utils import (
    arg_str,
    flow_response,
    invalid_form,
    mutation_response,
    server_failure,
    status_response,
)

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/suppliers")


def _supplier_dict(supplier: Supplier) -> dict:
    return serialize_model(supplier, exclude=("name_lowercase",))


def _apply_form(supplier: Supplier, form: SupplierForm) -> None:
    supplier.name = form.name.data.strip()
    supplier.name_lowercase = supplier.name.lower()
    supplier.contact_person = form.contact_person.data.strip()
    supplier.email = form.email.data.strip().lower()
    supplier.phone = form.phone.data.strip()
    supplier.status = form.status.data


# ---------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------
@suppliers_bp.route("", methods=["GET"])
@login_required
def list_suppliers():
    q = Supplier.query
    status = arg_str("status")
    if status:
        q = q.filter(Supplier.status == status)
    suppliers = q.order_by(Supplier.name.asc()).all()
    return jsonify({"suppliers": [_supplier_dict(s) for s in suppliers]})


@suppliers_bp.route("", methods=["POST"])
@login_required
def create_supplier():
    form = bind_form(SupplierForm)
    if not form.validate():
        return invalid_form(form)

    supplier = Supplier()
    _apply_form(supplier, form)

    try:
        db.session.add(supplier)
        db.session.flush()
        log_activity(f"New supplier added: {supplier.name}", "SUPPLIER_ADDED", f"/suppliers/{supplier.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to add supplier.")

    return mutation_response("Supplier added successfully.", status=201, id=supplier.id)


@suppliers_bp.route("/<int:supplier_id>", methods=["GET"])
@login_required
def supplier_detail(supplier_id: int):
    supplier = db.get_or_404(Supplier, supplier_id)

    data = _supplier_dict(supplier)
    data["contracts"] = [serialize_model(c) for c in supplier.contracts]
    data["purchase_requests"] = [
        {
            "id": pr.id,
            "item_name": pr.item_name,
            "quantity": pr.quantity,
            "total_cost": float(pr.total_cost or 0),
            "status": pr.status,
        }
        for pr in supplier.purchase_requests
    ]
    return jsonify(data)


@suppliers_bp.route("/<int:supplier_id>", methods=["PUT", "POST"])
@login_required
def update_supplier(supplier_id: int):
    supplier = db.get_or_404(Supplier, supplier_id)

    form = bind_form(SupplierForm)
    if not form.validate():
        return invalid_form(form)

    try:
        _apply_form(supplier, form)
        log_activity(f"Supplier updated: {supplier.name}", "SUPPLIER_UPDATED", f"/suppliers/{supplier.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to update supplier.")

    return mutation_response("Supplier updated successfully.")


@suppliers_bp.route("/<int:supplier_id>", methods=["DELETE"])
@login_required
def delete_supplier(supplier_id: int):
    supplier = db.get_or_404(Supplier, supplier_id)

    if supplier.purchase_requests:
        return status_response(
            False, "Cannot delete supplier with existing purchase requests.", status=409
        )

    contract_paths = [c.document_path for c in supplier.contracts]
    name = supplier.name
    try:
        db.session.delete(supplier)
        log_activity(f"Supplier deleted: {name}", "SUPPLIER_DELETED", "/suppliers")
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete supplier.", envelope="status")

    for path in contract_paths:
        delete_upload(path)
    return status_response(True, "Supplier deleted successfully.")


# ---------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------
@suppliers_bp.route("/<int:supplier_id>/evaluation", methods=["POST", "PUT"])
@login_required
def evaluate_supplier(supplier_id: int):
    supplier = db.get_or_404(Supplier, supplier_id)

    form = bind_form(EvaluationForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    try:
        supplier.rating = form.rating.data
        supplier.evaluation_notes = (form.evaluation_notes.data or "").strip() or None
        log_activity(
            f"Supplier {supplier.name} evaluated: {supplier.rating}/5",
            "SUPPLIER_EVALUATED",
            f"/suppliers/{supplier.id}",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to save evaluation.")

    return mutation_response("Evaluation saved successfully.")


# ---------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------
@suppliers_bp.route("/<int:supplier_id>/contracts", methods=["POST"])
@login_required
def add_contract(supplier_id: int):
    supplier = db.get_or_404(Supplier, supplier_id)

    form = bind_form(ContractForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    contract = SupplierContract(
        supplier_id=supplier.id,
        title=form.title.data.strip(),
        effective_date=form.effective_date.data,
    )
    document = None
    try:
        db.session.add(contract)
        db.session.flush()
        document = attach_upload(contract, form.document.data, f"suppliers/{supplier.id}/contracts", "document")
        db.session.commit()
    except Exception:
        discard_upload(document)
        return server_failure("Failed to add contract.")

    return mutation_response("Contract added successfully.", status=201, id=contract.id)


@suppliers_bp.route("/<int:supplier_id>/contracts/<int:contract_id>", methods=["DELETE"])
@login_required
def delete_contract(supplier_id: int, contract_id: int):
    contract = SupplierContract.query.filter_by(id=contract_id, supplier_id=supplier_id).first_or_404()

    document_path = contract.document_path
    try:
        db.session.delete(contract)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete contract.", envelope="status")

    delete_upload(document_path)
    return status_response(True, "Contract deleted successfully.")


@suppliers_bp.route("/<int:supplier_id>/ai/summary", methods=["POST"])
@login_required
def performance_summary(supplier_id: int):
    supplier = db.get_or_404(Supplier, supplier_id)
    return flow_response(lambda: flows.summarize_supplier_performance(supplier.id))
