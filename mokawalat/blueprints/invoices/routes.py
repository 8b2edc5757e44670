"""
mokawalat/blueprints/invoices/routes.py

Invoice routes

Includes:
- list / create / detail / update (Draft only)
- status changes (Sent, Void)
- marking paid (records an Income transaction)

IMPORTANT:
- Totals are computed server-side from line items (quantity x unit_price).
- Invoice numbers are generated on create and never change.
"""

from __future__ import annotations

import time

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...extensions import db
from ...forms import InvoiceForm, InvoiceStatusForm, MarkPaidForm, bind_form
from ...ledger import record_transaction
from ...models import Account, Client, Invoice, InvoiceLineItem, Project, TX_INCOME
from ...utils import arg_str, invalid_form, mutation_response, server_failure, status_response

invoices_bp = Blueprint("invoices", __name__, url_prefix="/invoices")

STATUS_TRANSITIONS = {
    "Draft": ("Sent", "Void"),
    "Sent": ("Void",),
}


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def _next_invoice_number() -> str:
    number = f"INV-{str(int(time.time() * 1000))[-6:]}"
    # Same millisecond suffix already taken: bump until free.
    while Invoice.query.filter_by(invoice_number=number).first() is not None:
        number = f"INV-{(int(number[4:]) + 1) % 1_000_000:06d}"
    return number


def _invoice_dict(invoice: Invoice, *, detail: bool = False) -> dict:
    data = serialize_model(invoice)
    data["client_name"] = invoice.client.name if invoice.client else None
    data["project_name"] = invoice.project.name if invoice.project else None
    if detail:
        data["line_items"] = [
            {
                "line_no": line.line_no,
                "description": line.description,
                "quantity": float(line.quantity),
                "unit_price": float(line.unit_price),
                "total": float(line.total),
            }
            for line in invoice.line_items
        ]
    return data


def _apply_form(invoice: Invoice, form: InvoiceForm) -> dict | None:
    if db.session.get(Client, form.client_id.data) is None:
        return {"client_id": ["Invalid client selected."]}
    if form.project_id.data is not None and db.session.get(Project, form.project_id.data) is None:
        return {"project_id": ["Invalid project selected."]}
    if form.due_date.data < form.issue_date.data:
        return {"due_date": ["Due date cannot be before the issue date."]}

    invoice.client_id = form.client_id.data
    invoice.project_id = form.project_id.data
    invoice.issue_date = form.issue_date.data
    invoice.due_date = form.due_date.data

    invoice.line_items = [
        InvoiceLineItem(
            line_no=index,
            description=entry.form.description.data.strip(),
            quantity=entry.form.quantity.data,
            unit_price=entry.form.unit_price.data,
        )
        for index, entry in enumerate(form.line_items.entries, start=1)
    ]
    invoice.recalc_total()
    return None


# ---------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------
@invoices_bp.route("", methods=["GET"])
@login_required
def list_invoices():
    q = Invoice.query
    status = arg_str("status")
    if status:
        q = q.filter(Invoice.status == status)
    invoices = q.order_by(Invoice.issue_date.desc(), Invoice.id.desc()).all()
    return jsonify({"invoices": [_invoice_dict(inv) for inv in invoices]})


@invoices_bp.route("", methods=["POST"])
@login_required
def create_invoice():
    form = bind_form(InvoiceForm)
    if not form.validate():
        return invalid_form(form)

    invoice = Invoice(status="Draft")
    errors = _apply_form(invoice, form)
    if errors:
        return mutation_response("Invalid data provided. Please check the form.", errors=errors, status=400)

    try:
        invoice.invoice_number = _next_invoice_number()
        db.session.add(invoice)
        db.session.flush()
        log_activity(
            f"Invoice {invoice.invoice_number} created for {invoice.client.name}",
            "INVOICE_CREATED",
            f"/invoices/{invoice.id}",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to create invoice.")

    return mutation_response(
        "Invoice created successfully.", status=201, id=invoice.id, invoice_number=invoice.invoice_number
    )


@invoices_bp.route("/<int:invoice_id>", methods=["GET"])
@login_required
def invoice_detail(invoice_id: int):
    invoice = db.get_or_404(Invoice, invoice_id)
    return jsonify(_invoice_dict(invoice, detail=True))


@invoices_bp.route("/<int:invoice_id>", methods=["PUT", "POST"])
@login_required
def update_invoice(invoice_id: int):
    invoice = db.get_or_404(Invoice, invoice_id)
    if invoice.status != "Draft":
        return mutation_response(
            "Only draft invoices can be edited.", errors={"_server": ["Invoice is not a draft."]}, status=409
        )

    form = bind_form(InvoiceForm)
    if not form.validate():
        return invalid_form(form)

    errors = _apply_form(invoice, form)
    if errors:
        db.session.rollback()
        return mutation_response("Invalid data provided. Please check the form.", errors=errors, status=400)

    try:
        db.session.commit()
    except Exception:
        return server_failure("Failed to update invoice.")

    return mutation_response("Invoice updated successfully.")


# ---------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------
@invoices_bp.route("/<int:invoice_id>/status", methods=["POST", "PUT"])
@login_required
def update_invoice_status(invoice_id: int):
    invoice = db.get_or_404(Invoice, invoice_id)

    form = bind_form(InvoiceStatusForm)
    if not form.validate():
        return status_response(False, "Invalid status.")
    new_status = form.status.data

    if new_status not in STATUS_TRANSITIONS.get(invoice.status, ()):
        return status_response(
            False, f"Cannot change invoice status from '{invoice.status}' to '{new_status}'.", status=409
        )

    try:
        invoice.status = new_status
        log_activity(
            f"Invoice {invoice.invoice_number} status changed to {new_status}",
            "INVOICE_STATUS_CHANGED",
            f"/invoices/{invoice.id}",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to update invoice status.", envelope="status")

    return status_response(True, f"Invoice {invoice.invoice_number} status updated to {new_status}")


@invoices_bp.route("/<int:invoice_id>/pay", methods=["POST"])
@login_required
def mark_paid(invoice_id: int):
    invoice = db.get_or_404(Invoice, invoice_id)

    form = bind_form(MarkPaidForm)
    if not form.validate():
        return status_response(False, "An account is required.")

    if invoice.status in ("Paid", "Void"):
        return status_response(False, f"Invoice is already {invoice.status.lower()}.", status=409)

    account = db.session.get(Account, form.account_id.data)
    if account is None:
        return status_response(False, "Selected account not found.", status=404)

    try:
        record_transaction(
            description=f"Payment for invoice {invoice.invoice_number}",
            amount=invoice.total_amount,
            type=TX_INCOME,
            account_id=account.id,
            project=invoice.project,
            client_id=invoice.client_id,
            invoice_id=invoice.id,
        )
        invoice.status = "Paid"
        log_activity(
            f"Invoice {invoice.invoice_number} status changed to Paid",
            "INVOICE_STATUS_CHANGED",
            f"/invoices/{invoice.id}",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to mark invoice as paid.", envelope="status")

    return status_response(True, "Invoice marked as paid and transaction recorded.")
