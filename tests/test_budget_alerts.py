"""Budget threshold detection and webhook delivery."""

from decimal import Decimal

import requests

from mokawalat.alerts import crossed_thresholds, send_budget_alert_webhooks
from mokawalat.models import ActivityLogEntry


def test_crossed_thresholds_is_exclusive_below_inclusive_above():
    assert crossed_thresholds(Decimal("70"), Decimal("75"), [75, 90, 100]) == [75]
    assert crossed_thresholds(Decimal("75"), Decimal("80"), [75, 90, 100]) == []
    assert crossed_thresholds(Decimal("10"), Decimal("120"), [100, 75, 90]) == [75, 90, 100]
    assert crossed_thresholds(Decimal("0"), Decimal("0"), [75]) == []


def _expense(client, project_id, amount):
    return client.post(
        "/financials/transactions",
        json={
            "description": "Concrete delivery",
            "amount": amount,
            "type": "Expense",
            "date": "2024-05-01",
            "project_id": project_id,
        },
    )


def test_each_threshold_alerts_once(app, user_client, make_project):
    project_id = make_project(budget="1000.00")

    first = _expense(user_client, project_id, "740")
    assert first.get_json()["budget_alerts"] == 0

    second = _expense(user_client, project_id, "200")
    assert second.get_json()["budget_alerts"] == 2

    third = _expense(user_client, project_id, "10")
    assert third.get_json()["budget_alerts"] == 0

    with app.app_context():
        alerts = ActivityLogEntry.query.filter_by(type="BUDGET_ALERT").order_by(ActivityLogEntry.id).all()
        assert [a.link for a in alerts] == [f"/projects/{project_id}"] * 2
        assert "75%" in alerts[0].message
        assert "90%" in alerts[1].message


def test_income_and_zero_budget_never_alert(app, user_client, make_project):
    zero_budget = make_project(name="Zero Budget", budget="0")
    normal = make_project(name="Normal", budget="100")

    assert _expense(user_client, zero_budget, "500").get_json()["budget_alerts"] == 0

    income = user_client.post(
        "/financials/transactions",
        json={"description": "Advance", "amount": "500", "type": "Income", "date": "2024-05-01", "project_id": normal},
    )
    assert income.status_code == 201
    assert income.get_json()["budget_alerts"] == 0

    with app.app_context():
        assert ActivityLogEntry.query.filter_by(type="BUDGET_ALERT").count() == 0


def test_webhook_failures_are_logged_not_raised(app, monkeypatch, caplog):
    app.config["WEBHOOK_BUDGET_ALERT_URLS"] = ["https://down.example.com", "https://up.example.com"]

    class _Response:
        def raise_for_status(self):
            return None

    def fake_post(url, json=None, timeout=None):
        if "down" in url:
            raise requests.ConnectionError("connection refused")
        return _Response()

    monkeypatch.setattr("mokawalat.alerts.requests.post", fake_post)

    with app.app_context():
        delivered = send_budget_alert_webhooks([{"type": "BUDGET_ALERT", "threshold": 90}])

    assert delivered == 1
    assert any("down.example.com" in record.getMessage() for record in caplog.records)


def test_no_urls_means_no_delivery(app):
    with app.app_context():
        assert send_budget_alert_webhooks([{"type": "BUDGET_ALERT"}]) == 0
