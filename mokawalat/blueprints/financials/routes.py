"""
mokawalat/blueprints/financials/routes.py

Financial routes

Includes:
- transactions: list (type / project / account filters), create, delete
- bank accounts: list (with computed balance), create, update, delete
- summary: total income / expense / net

IMPORTANT:
- An Expense tied to a project runs the budget threshold check.
- Budget alert webhooks go out after the commit.
- Accounts with transactions cannot be deleted.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...alerts import send_budget_alert_webhooks
from ...extensions import db
from ...forms import AccountForm, TransactionForm, bind_form
from ...ledger import financial_summary, record_transaction
from ...models import Account, Project, Transaction
from ...utils import (
    arg_int,
    arg_str,
    invalid_form,
    mutation_response,
    server_failure,
    status_response,
)

financials_bp = Blueprint("financials", __name__, url_prefix="/financials")


def _account_dict(account: Account) -> dict:
    data = serialize_model(account)
    data["balance"] = float(account.balance)
    return data


# ---------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------
@financials_bp.route("/transactions", methods=["GET"])
@login_required
def list_transactions():
    q = Transaction.query
    tx_type = arg_str("type")
    if tx_type:
        q = q.filter(Transaction.type == tx_type)
    project_id = arg_int("project_id")
    if project_id is not None:
        q = q.filter(Transaction.project_id == project_id)
    account_id = arg_int("account_id")
    if account_id is not None:
        q = q.filter(Transaction.account_id == account_id)

    rows = q.order_by(Transaction.date.desc(), Transaction.id.desc()).all()
    return jsonify({"transactions": [serialize_model(t) for t in rows]})


@financials_bp.route("/transactions", methods=["POST"])
@login_required
def create_transaction():
    form = bind_form(TransactionForm)
    if not form.validate():
        return invalid_form(form)

    errors = {}
    if form.account_id.data is not None and db.session.get(Account, form.account_id.data) is None:
        errors["account_id"] = ["Invalid account selected."]
    project = None
    if form.project_id.data is not None:
        project = db.session.get(Project, form.project_id.data)
        if project is None:
            errors["project_id"] = ["Invalid project selected."]
    if errors:
        return mutation_response("Invalid data provided. Please check the form.", errors=errors, status=400)

    try:
        transaction, payloads = record_transaction(
            description=form.description.data.strip(),
            amount=form.amount.data,
            type=form.type.data,
            date=form.date.data,
            account_id=form.account_id.data,
            project=project,
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to add transaction.")

    send_budget_alert_webhooks(payloads)
    return mutation_response(
        "Transaction added successfully.", status=201, id=transaction.id, budget_alerts=len(payloads)
    )


@financials_bp.route("/transactions/<int:transaction_id>", methods=["DELETE"])
@login_required
def delete_transaction(transaction_id: int):
    transaction = db.get_or_404(Transaction, transaction_id)
    description = transaction.description
    try:
        db.session.delete(transaction)
        log_activity(f"Transaction deleted: {description}", "TRANSACTION_DELETED", "/financials")
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete transaction.", envelope="status")
    return status_response(True, "Transaction deleted successfully.")


# ---------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------
@financials_bp.route("/accounts", methods=["GET"])
@login_required
def list_accounts():
    accounts = Account.query.order_by(Account.name.asc()).all()
    return jsonify({"accounts": [_account_dict(a) for a in accounts]})


@financials_bp.route("/accounts", methods=["POST"])
@login_required
def create_account():
    form = bind_form(AccountForm)
    if not form.validate():
        return invalid_form(form)

    account = Account(
        name=form.name.data.strip(),
        bank_name=form.bank_name.data.strip(),
        account_number=(form.account_number.data or "").strip() or None,
        initial_balance=form.initial_balance.data or 0,
    )
    try:
        db.session.add(account)
        db.session.flush()
        log_activity(f"New bank account added: {account.name}", "ACCOUNT_ADDED", "/financials")
        db.session.commit()
    except Exception:
        return server_failure("Failed to add account.")

    return mutation_response("Account added successfully.", status=201, id=account.id)


@financials_bp.route("/accounts/<int:account_id>", methods=["PUT", "POST"])
@login_required
def update_account(account_id: int):
    account = db.get_or_404(Account, account_id)

    form = bind_form(AccountForm)
    if not form.validate():
        return invalid_form(form)

    try:
        account.name = form.name.data.strip()
        account.bank_name = form.bank_name.data.strip()
        account.account_number = (form.account_number.data or "").strip() or None
        account.initial_balance = form.initial_balance.data or 0
        db.session.commit()
    except Exception:
        return server_failure("Failed to update account.")

    return mutation_response("Account updated successfully.")


@financials_bp.route("/accounts/<int:account_id>", methods=["DELETE"])
@login_required
def delete_account(account_id: int):
    account = db.get_or_404(Account, account_id)

    if account.transactions:
        return status_response(
            False, "Cannot delete account with existing transactions. Please re-assign them first.", status=409
        )

    try:
        db.session.delete(account)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete account.", envelope="status")
    return status_response(True, "Account deleted successfully.")


# ---------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------
@financials_bp.route("/summary", methods=["GET"])
@login_required
def summary():
    return jsonify(financial_summary(arg_int("project_id")))
