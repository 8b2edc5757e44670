"""Clients and suppliers: CRUD, delete guards, interactions and contracts."""

import io
from pathlib import Path

from mokawalat.extensions import db
from mokawalat.models import Client, ClientContract, Supplier, SupplierContract


def test_client_lifecycle_logs_activity(app, user_client):
    created = user_client.post(
        "/clients",
        json={"name": "Delta RE", "company": "Delta", "email": "Delta@Example.com", "phone": "01000000009"},
    )
    assert created.status_code == 201
    client_id = created.get_json()["id"]

    updated = user_client.put(
        f"/clients/{client_id}",
        json={"name": "Delta Real Estate", "email": "delta@example.com", "phone": "01000000009", "status": "Active"},
    )
    assert updated.status_code == 200

    deleted = user_client.delete(f"/clients/{client_id}")
    assert deleted.get_json()["success"] is True

    types = [e["type"] for e in user_client.get("/activity").get_json()["activity"]]
    assert types == ["CLIENT_DELETED", "CLIENT_UPDATED", "CLIENT_ADDED"]


def test_client_with_project_cannot_be_deleted(app, user_client, make_client_record, make_project):
    client_id = make_client_record()
    make_project(client_id=client_id)

    response = user_client.delete(f"/clients/{client_id}")
    assert response.status_code == 409
    assert response.get_json()["message"] == "Cannot delete client with active projects. Please re-assign them first."

    with app.app_context():
        assert db.session.get(Client, client_id) is not None


def test_client_interactions_newest_first(user_client, make_client_record):
    client_id = make_client_record()
    user_client.post(f"/clients/{client_id}/interactions", json={"type": "Call", "notes": "Intro call", "date": "2024-01-05"})
    user_client.post(f"/clients/{client_id}/interactions", json={"type": "Meeting", "notes": "Site visit", "date": "2024-02-10"})

    invalid = user_client.post(f"/clients/{client_id}/interactions", json={"type": "Fax", "notes": "Hi", "date": "2024-02-10"})
    assert invalid.status_code == 400

    detail = user_client.get(f"/clients/{client_id}").get_json()
    assert [i["type"] for i in detail["interactions"]] == ["Meeting", "Call"]


def test_supplier_with_purchase_requests_cannot_be_deleted(user_client, make_supplier, make_item, make_project):
    supplier_id = make_supplier()
    user_client.post(
        "/procurement",
        json={
            "item_id": make_item(),
            "supplier_id": supplier_id,
            "project_id": make_project(),
            "quantity": 1,
            "unit_cost": "10",
        },
    )

    response = user_client.delete(f"/suppliers/{supplier_id}")
    assert response.status_code == 409


def test_supplier_contract_document_is_stored_and_removed(app, user_client, make_supplier):
    supplier_id = make_supplier()

    created = user_client.post(
        f"/suppliers/{supplier_id}/contracts",
        data={
            "title": "Annual steel supply",
            "effective_date": "2024-01-01",
            "document": (io.BytesIO(b"contract body"), "contract.pdf"),
        },
        content_type="multipart/form-data",
    )
    assert created.status_code == 201
    contract_id = created.get_json()["id"]

    with app.app_context():
        contract = db.session.get(SupplierContract, contract_id)
        stored = Path(app.config["UPLOAD_FOLDER"]) / contract.document_path
    assert stored.read_bytes() == b"contract body"

    detail = user_client.get(f"/suppliers/{supplier_id}").get_json()
    assert detail["contracts"][0]["title"] == "Annual steel supply"
    assert "document_path" not in detail["contracts"][0]

    deleted = user_client.delete(f"/suppliers/{supplier_id}/contracts/{contract_id}")
    assert deleted.get_json()["success"] is True
    assert not stored.exists()


def test_supplier_evaluation_rating_range(app, user_client, make_supplier):
    supplier_id = make_supplier()

    assert user_client.post(f"/suppliers/{supplier_id}/evaluation", json={"rating": 0}).status_code == 400
    assert user_client.post(f"/suppliers/{supplier_id}/evaluation", json={"rating": 5}).status_code == 200

    with app.app_context():
        assert db.session.get(Supplier, supplier_id).rating == 5


def test_client_contract_with_document(app, user_client, make_client_record):
    client_id = make_client_record()

    short = user_client.post(f"/clients/{client_id}/contracts", json={"title": "AB", "effective_date": "2024-03-01"})
    assert short.status_code == 400

    created = user_client.post(
        f"/clients/{client_id}/contracts",
        data={
            "title": "Villa compound phase 1",
            "effective_date": "2024-03-01",
            "value": "2500000",
            "document": (io.BytesIO(b"signed"), "phase1.pdf"),
        },
        content_type="multipart/form-data",
    )
    assert created.status_code == 201
    contract_id = created.get_json()["id"]

    with app.app_context():
        contract = db.session.get(ClientContract, contract_id)
        stored = Path(app.config["UPLOAD_FOLDER"]) / contract.document_path
    assert stored.read_bytes() == b"signed"

    detail = user_client.get(f"/clients/{client_id}").get_json()
    assert detail["contracts"][0]["value"] == 2500000.0
    assert detail["contracts"][0]["document_url"].endswith("/phase1.pdf")

    types = [e["type"] for e in user_client.get("/activity").get_json()["activity"]]
    assert types == ["CONTRACT_ADDED"]

    deleted = user_client.delete(f"/clients/{client_id}/contracts/{contract_id}")
    assert deleted.get_json() == {"success": True, "message": "Contract deleted successfully."}
    assert not stored.exists()


def test_deleting_a_client_removes_contract_files(app, user_client, make_client_record):
    client_id = make_client_record()
    user_client.post(
        f"/clients/{client_id}/contracts",
        data={
            "title": "Maintenance retainer",
            "effective_date": "2024-01-15",
            "document": (io.BytesIO(b"retainer"), "retainer.pdf"),
        },
        content_type="multipart/form-data",
    )
    with app.app_context():
        stored = Path(app.config["UPLOAD_FOLDER"]) / ClientContract.query.one().document_path
    assert stored.exists()

    assert user_client.delete(f"/clients/{client_id}").get_json()["success"] is True
    assert not stored.exists()
    with app.app_context():
        assert ClientContract.query.count() == 0
