"""Transactions, accounts and the financial summary."""


def _tx(client, **overrides):
    payload = {"description": "Office rent", "amount": "250", "type": "Expense", "date": "2024-04-01"}
    payload.update(overrides)
    return client.post("/financials/transactions", json=payload)


def test_transaction_validation(user_client):
    response = _tx(user_client, amount="0", type="Refund")
    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert errors["amount"] == ["Amount must be a positive number."]
    assert "type" in errors

    unknown = _tx(user_client, account_id=42)
    assert unknown.status_code == 400
    assert unknown.get_json()["errors"] == {"account_id": ["Invalid account selected."]}


def test_summary_and_filters(user_client, make_project):
    project_id = make_project(budget="100000")
    _tx(user_client, amount="1000", type="Income", description="Client advance")
    _tx(user_client, amount="300", project_id=project_id)

    summary = user_client.get("/financials/summary").get_json()
    assert summary == {"total_income": 1000.0, "total_expense": 300.0, "net": 700.0}

    project_summary = user_client.get(f"/financials/summary?project_id={project_id}").get_json()
    assert project_summary["total_income"] == 0.0

    expenses = user_client.get("/financials/transactions?type=Expense").get_json()["transactions"]
    assert [t["description"] for t in expenses] == ["Office rent"]


def test_account_with_transactions_cannot_be_deleted(user_client):
    created = user_client.post(
        "/financials/accounts", json={"name": "Payroll Account", "bank_name": "CIB", "initial_balance": "5000"}
    )
    assert created.status_code == 201
    account_id = created.get_json()["id"]

    _tx(user_client, account_id=account_id)

    accounts = user_client.get("/financials/accounts").get_json()["accounts"]
    assert accounts[0]["balance"] == 4750.0

    response = user_client.delete(f"/financials/accounts/{account_id}")
    assert response.status_code == 409
    assert response.get_json()["message"] == (
        "Cannot delete account with existing transactions. Please re-assign them first."
    )


def test_empty_account_can_be_deleted(user_client, make_account):
    account_id = make_account()
    response = user_client.delete(f"/financials/accounts/{account_id}")
    assert response.get_json()["success"] is True
