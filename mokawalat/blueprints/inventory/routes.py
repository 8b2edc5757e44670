"""
mokawalat/blueprints/inventory/routes.py

Inventory routes

Includes:
- list / create / detail / update / delete
- manual stock adjustment (+/- delta)

IMPORTANT:
- Stock never goes negative.
- Status is recomputed from quantity on every adjustment
  (0 -> Out of Stock, 1..10 -> Low Stock, otherwise In Stock).
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...extensions import db
from ...forms import AdjustStockForm, InventoryForm, bind_form
from ...models import InventoryItem
from ...utils import arg_str, invalid_form, mutation_response, server_failure, status_response

inventory_bp = Blueprint("inventory", __name__, url_prefix="/inventory")


def _item_dict(item: InventoryItem) -> dict:
    return serialize_model(item, exclude=("name_lowercase",))


def _apply_form(item: InventoryItem, form: InventoryForm) -> None:
    item.name = form.name.data.strip()
    item.name_lowercase = item.name.lower()
    item.category = form.category.data.strip()
    item.quantity = form.quantity.data
    item.warehouse = form.warehouse.data.strip()
    item.status = form.status.data


@inventory_bp.route("", methods=["GET"])
@login_required
def list_items():
    q = InventoryItem.query
    status = arg_str("status")
    if status:
        q = q.filter(InventoryItem.status == status)
    category = arg_str("category")
    if category:
        q = q.filter(InventoryItem.category == category)
    items = q.order_by(InventoryItem.name.asc()).all()
    return jsonify({"items": [_item_dict(i) for i in items]})


@inventory_bp.route("", methods=["POST"])
@login_required
def create_item():
    form = bind_form(InventoryForm)
    if not form.validate():
        return invalid_form(form)

    item = InventoryItem()
    _apply_form(item, form)

    try:
        db.session.add(item)
        db.session.flush()
        log_activity(f"New inventory item added: {item.name}", "INVENTORY_ADDED", "/inventory")
        db.session.commit()
    except Exception:
        return server_failure("Failed to add item.")

    return mutation_response("Item added successfully.", status=201, id=item.id)


@inventory_bp.route("/<int:item_id>", methods=["GET"])
@login_required
def item_detail(item_id: int):
    item = db.get_or_404(InventoryItem, item_id)
    return jsonify(_item_dict(item))


@inventory_bp.route("/<int:item_id>", methods=["PUT", "POST"])
@login_required
def update_item(item_id: int):
    item = db.get_or_404(InventoryItem, item_id)

    form = bind_form(InventoryForm)
    if not form.validate():
        return invalid_form(form)

    try:
        _apply_form(item, form)
        log_activity(f"Inventory item updated: {item.name}", "INVENTORY_UPDATED", "/inventory")
        db.session.commit()
    except Exception:
        return server_failure("Failed to update item.")

    return mutation_response("Item updated successfully.")


@inventory_bp.route("/<int:item_id>", methods=["DELETE"])
@login_required
def delete_item(item_id: int):
    item = db.get_or_404(InventoryItem, item_id)
    name = item.name
    try:
        db.session.delete(item)
        log_activity(f"Inventory item deleted: {name}", "INVENTORY_DELETED", "/inventory")
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete item.", envelope="status")
    return status_response(True, "Item deleted successfully.")


@inventory_bp.route("/<int:item_id>/adjust", methods=["POST"])
@login_required
def adjust_stock(item_id: int):
    item = db.get_or_404(InventoryItem, item_id)

    form = bind_form(AdjustStockForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    delta = form.adjustment.data
    if (item.quantity or 0) + delta < 0:
        return mutation_response(
            "Stock quantity cannot go below zero.",
            errors={"adjustment": ["Stock quantity cannot go below zero."]},
            status=400,
        )

    try:
        item.apply_adjustment(delta)
        log_activity(f'Stock for "{item.name}" adjusted by {delta:+d}', "INVENTORY_ADJUSTED", "/inventory")
        db.session.commit()
    except Exception:
        return server_failure("Failed to adjust stock.")

    return mutation_response(
        "Stock adjusted successfully.", quantity=item.quantity, status=200, stock_status=item.status
    )
