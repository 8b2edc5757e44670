"""Role gate, company profile, user roles, language and navigation."""

import io
from pathlib import Path

from mokawalat.extensions import db
from mokawalat.models import CompanyProfile, InventoryCategory, User, Warehouse


def test_non_admin_get_on_admin_page_redirects_to_dashboard(user_client):
    for url in ("/approvals", "/settings/users"):
        response = user_client.get(url)
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/dashboard")


def test_non_admin_mutation_on_admin_route_is_forbidden(user_client):
    response = user_client.post("/settings/company", json={"name": "Hijack Ltd"})
    assert response.status_code == 403
    assert response.get_json()["success"] is False


def test_admin_updates_company_profile_with_logo(app, admin_client, user_client):
    response = admin_client.post(
        "/settings/company",
        data={"name": "Mokawalat Co.", "email": "INFO@mokawalat.com", "logo": (io.BytesIO(b"png"), "logo.png")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    assert response.get_json()["logo_url"] == "/uploads/company/1/logo.png"

    with app.app_context():
        profile = db.session.get(CompanyProfile, 1)
        assert profile.email == "info@mokawalat.com"

    company = user_client.get("/settings/company").get_json()["company"]
    assert company["name"] == "Mokawalat Co."
    assert "logo_path" not in company


def _post_logo(client, filename):
    return client.post(
        "/settings/company",
        data={"name": "Mokawalat Co.", "logo": (io.BytesIO(filename.encode()), filename)},
        content_type="multipart/form-data",
    )


def test_replacing_logo_removes_previous_file_after_commit(app, admin_client):
    uploads = Path(app.config["UPLOAD_FOLDER"])

    assert _post_logo(admin_client, "old.png").status_code == 200
    assert (uploads / "company/1/old.png").exists()

    assert _post_logo(admin_client, "new.png").status_code == 200
    assert not (uploads / "company/1/old.png").exists()
    assert (uploads / "company/1/new.png").read_bytes() == b"new.png"


def test_failed_logo_update_keeps_previous_file(app, admin_client, monkeypatch):
    uploads = Path(app.config["UPLOAD_FOLDER"])
    assert _post_logo(admin_client, "old.png").status_code == 200

    def failing_commit():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(db.session, "commit", failing_commit)
    response = _post_logo(admin_client, "new.png")
    monkeypatch.undo()

    assert response.status_code == 500
    assert (uploads / "company/1/old.png").exists()
    assert not (uploads / "company/1/new.png").exists()

    with app.app_context():
        assert db.session.get(CompanyProfile, 1).logo_path == "company/1/old.png"


def test_admin_changes_roles_but_not_their_own(app, admin_client, user_client):
    with app.app_context():
        admin_id = User.query.filter_by(email="boss@mokawalat.com").one().id
        worker_id = User.query.filter_by(email="worker@mokawalat.com").one().id

    promoted = admin_client.put(f"/settings/users/{worker_id}/role", json={"role": "manager"})
    assert promoted.get_json()["success"] is True

    own = admin_client.put(f"/settings/users/{admin_id}/role", json={"role": "user"})
    assert own.status_code == 409

    invalid = admin_client.put(f"/settings/users/{worker_id}/role", json={"role": "superuser"})
    assert invalid.status_code == 400

    with app.app_context():
        assert db.session.get(User, worker_id).role == "manager"


def test_language_switch_changes_direction_and_labels(user_client):
    response = user_client.put("/settings/language", json={"locale": "ar"})
    assert response.get_json()["direction"] == "rtl"

    sections = user_client.get("/navigation").get_json()["sections"]
    labels = [item["label"] for section in sections for item in section["items"]]
    assert "لوحة التحكم" in labels

    assert user_client.put("/settings/language", json={"locale": "fr"}).status_code == 400


def test_navigation_hides_admin_items_from_users(user_client, admin_client):
    def urls(client):
        sections = client.get("/navigation").get_json()["sections"]
        return {item["url"] for section in sections for item in section["items"]}

    assert "/settings/users" not in urls(user_client)
    assert "/employees/payroll" not in urls(user_client)
    assert {"/settings/users", "/employees/payroll", "/approvals"} <= urls(admin_client)


def test_admin_manages_warehouses(app, admin_client, user_client):
    created = admin_client.post("/settings/warehouses", json={"name": "Main Yard", "location": "6th of October"})
    assert created.status_code == 201
    warehouse_id = created.get_json()["id"]

    duplicate = admin_client.post("/settings/warehouses", json={"name": "main yard"})
    assert duplicate.status_code == 400
    assert duplicate.get_json()["errors"]["name"] == ["A warehouse with this name already exists."]

    assert user_client.post("/settings/warehouses", json={"name": "Side Yard"}).status_code == 403

    renamed = admin_client.put(f"/settings/warehouses/{warehouse_id}", json={"name": "North Yard"})
    assert renamed.get_json()["message"] == "Warehouse updated successfully."

    listed = user_client.get("/settings/warehouses").get_json()["warehouses"]
    assert [(w["name"], w["location"]) for w in listed] == [("North Yard", None)]

    deleted = admin_client.delete(f"/settings/warehouses/{warehouse_id}")
    assert deleted.get_json() == {"success": True, "message": "Warehouse deleted successfully."}
    with app.app_context():
        assert db.session.get(Warehouse, warehouse_id) is None


def test_admin_manages_inventory_categories(app, admin_client, user_client):
    short = admin_client.post("/settings/categories", json={"name": "X"})
    assert short.status_code == 400

    first = admin_client.post("/settings/categories", json={"name": "Steel"}).get_json()["id"]
    admin_client.post("/settings/categories", json={"name": "Aggregates"})

    names = [c["name"] for c in user_client.get("/settings/categories").get_json()["categories"]]
    assert names == ["Aggregates", "Steel"]

    clash = admin_client.put(f"/settings/categories/{first}", json={"name": "Aggregates"})
    assert clash.status_code == 400

    assert admin_client.delete(f"/settings/categories/{first}").get_json()["success"] is True
    with app.app_context():
        assert [c.name for c in InventoryCategory.query.all()] == ["Aggregates"]
