"""Inventory CRUD and stock adjustments."""

from mokawalat.extensions import db
from mokawalat.models import ActivityLogEntry, InventoryItem, stock_status_for


def test_stock_status_thresholds():
    assert stock_status_for(0) == "Out of Stock"
    assert stock_status_for(1) == "Low Stock"
    assert stock_status_for(10) == "Low Stock"
    assert stock_status_for(11) == "In Stock"


def test_create_item_validates_fields(user_client):
    response = user_client.post(
        "/inventory", json={"name": "X", "category": "Steel", "quantity": -1, "warehouse": "Main"}
    )
    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert errors["name"] == ["Name must be at least 2 characters long."]
    assert errors["quantity"] == ["Quantity cannot be negative."]


def test_create_item_accepts_zero_quantity(user_client):
    response = user_client.post(
        "/inventory",
        json={"name": "Tiles", "category": "Finishing", "quantity": 0, "warehouse": "Site", "status": "Out of Stock"},
    )
    assert response.status_code == 201


def test_adjust_stock_recomputes_status(app, user_client, make_item):
    item_id = make_item(quantity=12)

    response = user_client.post(f"/inventory/{item_id}/adjust", json={"adjustment": -5})
    assert response.status_code == 200
    assert response.get_json()["quantity"] == 7
    assert response.get_json()["stock_status"] == "Low Stock"

    with app.app_context():
        entry = ActivityLogEntry.query.filter_by(type="INVENTORY_ADJUSTED").one()
        assert entry.message == 'Stock for "Cement" adjusted by -5'


def test_adjust_stock_cannot_go_negative(app, user_client, make_item):
    item_id = make_item(quantity=3)

    response = user_client.post(f"/inventory/{item_id}/adjust", json={"adjustment": -4})
    assert response.status_code == 400

    zero = user_client.post(f"/inventory/{item_id}/adjust", json={"adjustment": 0})
    assert zero.status_code == 400
    assert zero.get_json()["errors"]["adjustment"] == ["Adjustment cannot be zero."]

    with app.app_context():
        assert db.session.get(InventoryItem, item_id).quantity == 3


def test_delete_item(app, user_client, make_item):
    item_id = make_item()
    response = user_client.delete(f"/inventory/{item_id}")
    assert response.get_json() == {"success": True, "message": "Item deleted successfully."}

    with app.app_context():
        assert db.session.get(InventoryItem, item_id) is None
