"""
mokawalat/blueprints/clients/routes.py

Client (CRM) routes

Includes:
- list / create / detail / update / delete
- interaction history (calls, emails, meetings, notes)
- contracts with an optional signed document
- AI interaction summary

IMPORTANT:
- A client referenced by projects, invoices or transactions cannot be deleted.
- Contract files are removed only after the row delete is committed.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...ai import flows
from ...extensions import db
from ...forms import ClientContractForm, ClientForm, InteractionForm, bind_form
from ...models import Client, ClientContract, ClientInteraction, Invoice, Transaction
from ...storage import attach_upload, delete_upload, discard_upload
from ...utils import (
    arg_str,
    flow_response,
    invalid_form,
    mutation_response,
    server_failure,
    status_response,
)

clients_bp = Blueprint("clients", __name__, url_prefix="/clients")


def _client_dict(client: Client) -> dict:
    return serialize_model(client, exclude=("name_lowercase",))


def _apply_form(client: Client, form: ClientForm) -> None:
    client.name = form.name.data.strip()
    client.name_lowercase = client.name.lower()
    client.company = (form.company.data or "").strip() or None
    client.email = form.email.data.strip().lower()
    client.phone = form.phone.data.strip()
    client.status = form.status.data


def _delete_blocker(client: Client) -> str | None:
    if client.projects:
        return "Cannot delete client with active projects. Please re-assign them first."
    if db.session.query(Invoice.query.filter(Invoice.client_id == client.id).exists()).scalar():
        return "Cannot delete client with existing invoices."
    if db.session.query(Transaction.query.filter(Transaction.client_id == client.id).exists()).scalar():
        return "Cannot delete client with existing financial transactions."
    return None


# ---------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------
@clients_bp.route("", methods=["GET"])
@login_required
def list_clients():
    q = Client.query
    status = arg_str("status")
    if status:
        q = q.filter(Client.status == status)
    clients = q.order_by(Client.name.asc()).all()
    return jsonify({"clients": [_client_dict(c) for c in clients]})


@clients_bp.route("", methods=["POST"])
@login_required
def create_client():
    form = bind_form(ClientForm)
    if not form.validate():
        return invalid_form(form)

    client = Client()
    _apply_form(client, form)

    try:
        db.session.add(client)
        db.session.flush()
        log_activity(f"New client added: {client.name}", "CLIENT_ADDED", f"/clients/{client.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to add client.")

    return mutation_response("Client added successfully.", status=201, id=client.id)


@clients_bp.route("/<int:client_id>", methods=["GET"])
@login_required
def client_detail(client_id: int):
    client = db.get_or_404(Client, client_id)

    data = _client_dict(client)
    data["projects"] = [{"id": p.id, "name": p.name, "status": p.status} for p in client.projects]
    data["invoices"] = [
        {
            "id": inv.id,
            "invoice_number": inv.invoice_number,
            "status": inv.status,
            "total_amount": float(inv.total_amount or 0),
        }
        for inv in client.invoices
    ]
    data["interactions"] = [serialize_model(i) for i in client.interactions]
    data["contracts"] = [serialize_model(c) for c in client.contracts]
    return jsonify(data)


@clients_bp.route("/<int:client_id>", methods=["PUT", "POST"])
@login_required
def update_client(client_id: int):
    client = db.get_or_404(Client, client_id)

    form = bind_form(ClientForm)
    if not form.validate():
        return invalid_form(form)

    try:
        _apply_form(client, form)
        log_activity(f"Client details updated: {client.name}", "CLIENT_UPDATED", f"/clients/{client.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to update client.")

    return mutation_response("Client updated successfully.")


@clients_bp.route("/<int:client_id>", methods=["DELETE"])
@login_required
def delete_client(client_id: int):
    client = db.get_or_404(Client, client_id)

    blocker = _delete_blocker(client)
    if blocker:
        return status_response(False, blocker, status=409)

    contract_paths = [c.document_path for c in client.contracts]
    name = client.name
    try:
        db.session.delete(client)
        log_activity(f"Client deleted: {name}", "CLIENT_DELETED", "/clients")
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete client.", envelope="status")

    for path in contract_paths:
        delete_upload(path)
    return status_response(True, "Client deleted successfully.")


# ---------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------
@clients_bp.route("/<int:client_id>/interactions", methods=["GET"])
@login_required
def list_interactions(client_id: int):
    client = db.get_or_404(Client, client_id)
    return jsonify({"interactions": [serialize_model(i) for i in client.interactions]})


@clients_bp.route("/<int:client_id>/interactions", methods=["POST"])
@login_required
def add_interaction(client_id: int):
    client = db.get_or_404(Client, client_id)

    form = bind_form(InteractionForm)
    if not form.validate():
        return invalid_form(form)

    interaction = ClientInteraction(
        client_id=client.id,
        type=form.type.data,
        notes=form.notes.data.strip(),
        date=form.date.data,
    )
    try:
        db.session.add(interaction)
        db.session.commit()
    except Exception:
        return server_failure("Failed to add interaction.")

    return mutation_response("Interaction added successfully.", status=201, id=interaction.id)


# ---------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------
@clients_bp.route("/<int:client_id>/contracts", methods=["POST"])
@login_required
def add_contract(client_id: int):
    client = db.get_or_404(Client, client_id)

    form = bind_form(ClientContractForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    contract = ClientContract(
        client_id=client.id,
        title=form.title.data.strip(),
        effective_date=form.effective_date.data,
        value=form.value.data,
    )
    document = None
    try:
        db.session.add(contract)
        db.session.flush()
        document = attach_upload(contract, form.document.data, f"clients/{client.id}/contracts", "document")
        log_activity(f"New contract added for client: {contract.title}", "CONTRACT_ADDED", f"/clients/{client.id}")
        db.session.commit()
    except Exception:
        discard_upload(document)
        return server_failure("Failed to add contract.")

    return mutation_response("Contract added successfully.", status=201, id=contract.id)


@clients_bp.route("/<int:client_id>/contracts/<int:contract_id>", methods=["DELETE"])
@login_required
def delete_contract(client_id: int, contract_id: int):
    contract = ClientContract.query.filter_by(id=contract_id, client_id=client_id).first_or_404()

    document_path = contract.document_path
    try:
        db.session.delete(contract)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete contract.", envelope="status")

    delete_upload(document_path)
    return status_response(True, "Contract deleted successfully.")


@clients_bp.route("/<int:client_id>/ai/summary", methods=["POST"])
@login_required
def interaction_summary(client_id: int):
    client = db.get_or_404(Client, client_id)
    return flow_response(lambda: flows.summarize_client_interactions(client.id))
