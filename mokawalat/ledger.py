"""
mokawalat/ledger.py

Recording financial transactions.

Used by:
- Financials (manual transactions)
- Procurement (ordering a PO records an Expense)
- Invoices (marking paid records Income)

IMPORTANT:
- record_transaction() only ADDS rows (transaction + activity + budget alerts)
  to the session. The calling route commits, then delivers webhook payloads.
"""

from __future__ import annotations

from datetime import date as date_type, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func

from .activity import log_activity
from .alerts import check_budget_thresholds
from .extensions import db
from .models import Account, Project, Transaction, TX_EXPENSE, TX_INCOME, _money, _to_decimal
from .errors import BusinessRuleError


def first_account() -> Account:
    """Default account for automatic postings (oldest account)."""
    account = Account.query.order_by(Account.created_at.asc(), Account.id.asc()).first()
    if account is None:
        raise BusinessRuleError(
            "No bank accounts found. Please add an account in Financials > Manage Accounts before ordering."
        )
    return account


def record_transaction(
    *,
    description: str,
    amount,
    type: str,
    date: Optional[datetime] = None,
    account_id: Optional[int] = None,
    project: Optional[Project] = None,
    **links: Any,
) -> Tuple[Transaction, List[Dict[str, Any]]]:
    """
    Add a Transaction (and its TRANSACTION_ADDED activity) to the session.

    For an Expense tied to a project, the budget thresholds are checked and the
    resulting webhook payloads are returned alongside the transaction.
    """
    amount = _money(_to_decimal(amount))
    if isinstance(date, date_type) and not isinstance(date, datetime):
        date = datetime.combine(date, time.min)
    previous_total: Optional[Decimal] = None
    if project is not None and type == TX_EXPENSE:
        previous_total = project.total_expense()

    transaction = Transaction(
        description=description,
        amount=amount,
        type=type,
        date=date or datetime.utcnow(),
        account_id=account_id,
        project_id=project.id if project is not None else None,
        **links,
    )
    db.session.add(transaction)
    db.session.flush()

    log_activity(f"{type} of {amount:,} recorded: {description}", "TRANSACTION_ADDED", "/financials")

    payloads: List[Dict[str, Any]] = []
    if previous_total is not None:
        payloads = check_budget_thresholds(project, previous_total, amount)

    return transaction, payloads


def financial_summary(project_id: Optional[int] = None) -> Dict[str, float]:
    """Total income, total expense and net across all (or one project's) transactions."""
    q = db.session.query(Transaction.type, func.coalesce(func.sum(Transaction.amount), 0))
    if project_id is not None:
        q = q.filter(Transaction.project_id == project_id)
    totals = {tx_type: _to_decimal(amount) for tx_type, amount in q.group_by(Transaction.type).all()}

    income = _money(totals.get(TX_INCOME, Decimal("0.00")))
    expense = _money(totals.get(TX_EXPENSE, Decimal("0.00")))
    return {"total_income": float(income), "total_expense": float(expense), "net": float(income - expense)}
