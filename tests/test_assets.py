"""Equipment & assets: CRUD, project assignment and maintenance logs."""

from mokawalat.extensions import db
from mokawalat.models import ActivityLogEntry, Asset, MaintenanceLog


def _asset_payload(**overrides):
    payload = {
        "name": "Excavator CAT 320",
        "category": "Heavy Machinery",
        "status": "Available",
        "purchase_date": "2023-06-01",
        "purchase_cost": "4500000",
    }
    payload.update(overrides)
    return payload


def test_asset_lifecycle_logs_activity(app, user_client, make_project):
    project_id = make_project()

    created = user_client.post("/assets", json=_asset_payload())
    assert created.status_code == 201
    asset_id = created.get_json()["id"]

    updated = user_client.put(
        f"/assets/{asset_id}",
        json=_asset_payload(status="In Use", current_project_id=project_id, next_maintenance_date="2024-09-01"),
    )
    assert updated.get_json()["message"] == "Asset updated successfully."

    detail = user_client.get(f"/assets/{asset_id}").get_json()
    assert detail["status"] == "In Use"
    assert detail["current_project_name"] == "Tower A"
    assert detail["purchase_cost"] == 4500000.0
    assert detail["next_maintenance_date"] == "2024-09-01"

    in_use = user_client.get(f"/assets?project_id={project_id}").get_json()["assets"]
    assert [a["id"] for a in in_use] == [asset_id]

    assert user_client.delete(f"/assets/{asset_id}").get_json()["success"] is True

    with app.app_context():
        assert db.session.get(Asset, asset_id) is None
        types = [e.type for e in ActivityLogEntry.query.order_by(ActivityLogEntry.id).all()]
        assert types == ["ASSET_ADDED", "ASSET_UPDATED", "ASSET_DELETED"]


def test_asset_validation(user_client):
    bad_cost = user_client.post("/assets", json=_asset_payload(purchase_cost="-1"))
    assert bad_cost.status_code == 400
    assert bad_cost.get_json()["errors"]["purchase_cost"] == ["Purchase cost must be a non-negative number."]

    bad_status = user_client.post("/assets", json=_asset_payload(status="Lost"))
    assert bad_status.status_code == 400

    bad_project = user_client.post("/assets", json=_asset_payload(current_project_id=999))
    assert bad_project.status_code == 400
    assert bad_project.get_json()["errors"] == {"current_project_id": ["Invalid project selected."]}


def test_maintenance_logs_newest_first_and_removed_with_asset(app, user_client):
    asset_id = user_client.post("/assets", json=_asset_payload()).get_json()["id"]

    short = user_client.post(
        f"/assets/{asset_id}/maintenance", json={"date": "2024-01-10", "type": "Service", "description": "Oil"}
    )
    assert short.status_code == 400

    first = user_client.post(
        f"/assets/{asset_id}/maintenance",
        json={"date": "2024-01-10", "type": "Service", "description": "Engine oil and filters", "cost": "3500"},
    )
    assert first.get_json()["message"] == "Maintenance log added successfully."
    user_client.post(
        f"/assets/{asset_id}/maintenance",
        json={
            "date": "2024-04-02",
            "type": "Repair",
            "description": "Replaced hydraulic hose",
            "completed_by": "Cairo Machinery Services",
        },
    )

    logs = user_client.get(f"/assets/{asset_id}").get_json()["maintenance_logs"]
    assert [(m["type"], m["cost"]) for m in logs] == [("Repair", None), ("Service", 3500.0)]

    user_client.delete(f"/assets/{asset_id}")
    with app.app_context():
        assert MaintenanceLog.query.count() == 0


def test_unknown_records_are_404(user_client):
    for url in ("/assets/999", "/inventory/999", "/clients/999", "/projects/999"):
        response = user_client.get(url)
        assert response.status_code == 404
        assert response.get_json()["success"] is False
