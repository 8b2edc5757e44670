"""Projects: validation, team, daily logs and material requests."""

from mokawalat.extensions import db
from mokawalat.models import ActivityLogEntry, InventoryItem, MaterialRequest, Project


def _project_payload(**overrides):
    payload = {
        "name": "Marina Towers",
        "description": "Two residential towers",
        "location": "Alexandria",
        "budget": 250000,
        "start_date": "2024-03-01",
        "status": "Planning",
    }
    payload.update(overrides)
    return payload


def test_create_project_logs_activity(app, user_client, make_employee):
    employee_id = make_employee()

    response = user_client.post("/projects", json=_project_payload(team_member_ids=[employee_id]))
    assert response.status_code == 201
    project_id = response.get_json()["id"]

    with app.app_context():
        project = db.session.get(Project, project_id)
        assert project.name_lowercase == "marina towers"
        assert [e.id for e in project.team_members] == [employee_id]
        entry = ActivityLogEntry.query.filter_by(type="PROJECT_CREATED").one()
        assert entry.link == f"/projects/{project_id}"


def test_create_project_reports_field_errors(user_client):
    response = user_client.post("/projects", json=_project_payload(name="AB", budget=-5, start_date="not-a-date"))
    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert errors["name"] == ["Project name must be at least 3 characters long."]
    assert errors["budget"] == ["Budget must be a positive number."]
    assert "start_date" in errors


def test_create_project_rejects_unknown_client(user_client):
    response = user_client.post("/projects", json=_project_payload(client_id=999))
    assert response.status_code == 400
    assert response.get_json()["errors"] == {"client_id": ["Invalid client selected."]}


def test_project_detail_includes_budget_usage(user_client, make_project):
    project_id = make_project(budget="1000.00")
    response = user_client.get(f"/projects/{project_id}")
    assert response.status_code == 200
    body = response.get_json()
    assert body["total_expense"] == 0.0
    assert body["budget_usage_percent"] == 0.0


def test_assign_team_rejects_unknown_employees(user_client, make_project, make_employee):
    project_id = make_project()
    employee_id = make_employee()

    bad = user_client.put(f"/projects/{project_id}/team", json={"employee_ids": [employee_id, 404]})
    assert bad.status_code == 400
    assert "404" in bad.get_json()["errors"]["employee_ids"][0]

    ok = user_client.put(f"/projects/{project_id}/team", json={"employee_ids": [employee_id]})
    assert ok.status_code == 200
    assert ok.get_json()["team_member_ids"] == [employee_id]


def test_daily_log_length_is_enforced(user_client, make_project):
    project_id = make_project()

    short = user_client.post(f"/projects/{project_id}/logs", json={"notes": "too short"})
    assert short.status_code == 400

    ok = user_client.post(f"/projects/{project_id}/logs", json={"notes": "Poured the ground floor slab today."})
    assert ok.status_code == 201

    logs = user_client.get(f"/projects/{project_id}/logs").get_json()["logs"]
    assert logs[0]["author_email"] == "worker@mokawalat.com"


def test_unknown_project_returns_404(user_client):
    response = user_client.get("/projects/12345")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


# ---------------------------------------------------------------------
# Material requests
# ---------------------------------------------------------------------
def test_material_request_approval_moves_stock(app, user_client, manager_client, make_project, make_item):
    project_id = make_project()
    item_id = make_item(quantity=20)

    created = user_client.post(f"/projects/{project_id}/material-requests", json={"item_id": item_id, "quantity": 12})
    assert created.status_code == 201
    request_id = created.get_json()["id"]

    response = manager_client.post(f"/material-requests/{request_id}/status", json={"status": "Approved"})
    assert response.status_code == 200
    assert response.get_json() == {"success": True, "message": "Request has been approved."}

    with app.app_context():
        item = db.session.get(InventoryItem, item_id)
        assert item.quantity == 8
        assert item.status == "Low Stock"
        assert db.session.get(MaterialRequest, request_id).status == "Approved"
        entry = ActivityLogEntry.query.filter_by(type="MATERIAL_REQUEST_APPROVED").one()
        assert entry.link == f"/projects/{project_id}"


def test_material_request_approval_fails_on_insufficient_stock(app, user_client, manager_client, make_project, make_item):
    project_id = make_project()
    item_id = make_item(name="Rebar", quantity=3)

    created = user_client.post(f"/projects/{project_id}/material-requests", json={"item_id": item_id, "quantity": 5})
    request_id = created.get_json()["id"]

    response = manager_client.post(f"/material-requests/{request_id}/status", json={"status": "Approved"})
    assert response.status_code == 409
    assert response.get_json()["message"].startswith("Insufficient stock for Rebar.")

    with app.app_context():
        assert db.session.get(InventoryItem, item_id).quantity == 3
        assert db.session.get(MaterialRequest, request_id).status == "Pending"


def test_material_request_rejection_keeps_stock(app, user_client, manager_client, make_project, make_item):
    project_id = make_project()
    item_id = make_item(quantity=20)
    request_id = user_client.post(
        f"/projects/{project_id}/material-requests", json={"item_id": item_id, "quantity": 5}
    ).get_json()["id"]

    response = manager_client.post(f"/material-requests/{request_id}/status", json={"status": "Rejected"})
    assert response.get_json()["message"] == "Request has been rejected."

    with app.app_context():
        assert db.session.get(InventoryItem, item_id).quantity == 20


def test_approved_material_request_cannot_be_rejected(app, user_client, manager_client, make_project, make_item):
    project_id = make_project()
    item_id = make_item(quantity=50)
    request_id = user_client.post(
        f"/projects/{project_id}/material-requests", json={"item_id": item_id, "quantity": 20}
    ).get_json()["id"]

    approved = manager_client.post(f"/material-requests/{request_id}/status", json={"status": "Approved"})
    assert approved.status_code == 200

    rejected = manager_client.post(f"/material-requests/{request_id}/status", json={"status": "Rejected"})
    assert rejected.status_code == 409
    assert rejected.get_json() == {"success": False, "message": "This request has already been actioned."}

    with app.app_context():
        assert db.session.get(InventoryItem, item_id).quantity == 30
        assert db.session.get(MaterialRequest, request_id).status == "Approved"
        assert ActivityLogEntry.query.filter_by(type="MATERIAL_REQUEST_REJECTED").count() == 0


def test_plain_user_cannot_decide_material_requests(user_client, make_project, make_item):
    project_id = make_project()
    item_id = make_item()
    request_id = user_client.post(
        f"/projects/{project_id}/material-requests", json={"item_id": item_id, "quantity": 1}
    ).get_json()["id"]

    response = user_client.post(f"/material-requests/{request_id}/status", json={"status": "Approved"})
    assert response.status_code == 403
