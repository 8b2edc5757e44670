"""Purchase request workflow: creation, transitions, ordering and receiving."""

import pytest

from mokawalat.extensions import db
from mokawalat.models import ActivityLogEntry, InventoryItem, PurchaseRequest, Transaction


@pytest.fixture
def purchase_request(user_client, make_project, make_item, make_supplier):
    """A Pending request for 10 x 80.00 charged to a 1000.00 budget project."""
    project_id = make_project(budget="1000.00")
    item_id = make_item(quantity=5)
    supplier_id = make_supplier()
    response = user_client.post(
        "/procurement",
        json={
            "item_id": item_id,
            "supplier_id": supplier_id,
            "project_id": project_id,
            "quantity": 10,
            "unit_cost": "80.00",
        },
    )
    assert response.status_code == 201
    return {"id": response.get_json()["id"], "project_id": project_id, "item_id": item_id}


def test_create_computes_total_and_logs(app, purchase_request):
    with app.app_context():
        pr = db.session.get(PurchaseRequest, purchase_request["id"])
        assert float(pr.total_cost) == 800.0
        assert pr.status == "Pending"
        assert pr.item_name == "Cement"
        assert ActivityLogEntry.query.filter_by(type="PO_CREATED").count() == 1


def test_create_rejects_unknown_references(user_client):
    response = user_client.post(
        "/procurement",
        json={"item_id": 1, "supplier_id": 2, "project_id": 3, "quantity": 1, "unit_cost": "5"},
    )
    assert response.status_code == 400
    assert set(response.get_json()["errors"]) == {"item_id", "supplier_id", "project_id"}


def test_invalid_transition_is_refused(manager_client, purchase_request):
    response = manager_client.post(f"/procurement/{purchase_request['id']}/status", json={"status": "Ordered"})
    assert response.status_code == 409
    assert response.get_json()["message"] == "Cannot change status from 'Pending' to 'Ordered'."


def test_plain_user_cannot_change_status(user_client, purchase_request):
    response = user_client.post(f"/procurement/{purchase_request['id']}/status", json={"status": "Approved"})
    assert response.status_code == 403


def test_ordering_without_account_fails(app, manager_client, purchase_request):
    pr_id = purchase_request["id"]
    manager_client.post(f"/procurement/{pr_id}/status", json={"status": "Approved"})

    response = manager_client.post(f"/procurement/{pr_id}/status", json={"status": "Ordered"})
    assert response.status_code == 409
    assert response.get_json()["message"].startswith("No bank accounts found.")

    with app.app_context():
        assert db.session.get(PurchaseRequest, pr_id).status == "Approved"
        assert Transaction.query.count() == 0


def test_ordering_records_expense_and_budget_alert(app, monkeypatch, manager_client, purchase_request, make_account):
    account_id = make_account()
    pr_id = purchase_request["id"]
    app.config["WEBHOOK_BUDGET_ALERT_URLS"] = ["https://hooks.example.com/budget"]

    sent = []

    class _Response:
        def raise_for_status(self):
            return None

    def fake_post(url, json=None, timeout=None):
        sent.append((url, json))
        return _Response()

    monkeypatch.setattr("mokawalat.alerts.requests.post", fake_post)

    manager_client.post(f"/procurement/{pr_id}/status", json={"status": "Approved"})
    response = manager_client.post(f"/procurement/{pr_id}/status", json={"status": "Ordered"})
    assert response.status_code == 200

    with app.app_context():
        transaction = Transaction.query.filter_by(purchase_order_id=pr_id).one()
        assert transaction.type == "Expense"
        assert float(transaction.amount) == 800.0
        assert transaction.account_id == account_id
        assert transaction.project_id == purchase_request["project_id"]

        alert = ActivityLogEntry.query.filter_by(type="BUDGET_ALERT").one()
        assert "75%" in alert.message
        assert ActivityLogEntry.query.filter_by(type="PO_STATUS_CHANGED").count() == 2

    assert len(sent) == 1
    url, payload = sent[0]
    assert url == "https://hooks.example.com/budget"
    assert payload["threshold"] == 75
    assert payload["projectId"] == purchase_request["project_id"]
    assert payload["percent"] == 80.0


def test_receive_adds_stock(app, manager_client, user_client, purchase_request, make_account):
    make_account()
    pr_id = purchase_request["id"]

    early = user_client.post(f"/procurement/{pr_id}/receive")
    assert early.status_code == 409
    assert early.get_json()["message"] == "Only 'Ordered' purchase orders can be marked as received."

    manager_client.post(f"/procurement/{pr_id}/status", json={"status": "Approved"})
    manager_client.post(f"/procurement/{pr_id}/status", json={"status": "Ordered"})

    response = user_client.post(f"/procurement/{pr_id}/receive")
    assert response.status_code == 200

    with app.app_context():
        item = db.session.get(InventoryItem, purchase_request["item_id"])
        assert item.quantity == 15
        assert item.status == "In Stock"
        assert db.session.get(PurchaseRequest, pr_id).status == "Received"


def test_only_pending_requests_are_editable(manager_client, user_client, purchase_request):
    pr_id = purchase_request["id"]
    manager_client.post(f"/procurement/{pr_id}/status", json={"status": "Rejected"})

    response = user_client.put(
        f"/procurement/{pr_id}",
        json={"item_id": 1, "supplier_id": 1, "project_id": 1, "quantity": 2, "unit_cost": "1"},
    )
    assert response.status_code == 409
