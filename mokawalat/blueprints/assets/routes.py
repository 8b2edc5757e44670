"""
mokawalat/blueprints/assets/routes.py

Equipment & asset routes

Includes:
- list / create / detail / update / delete
- maintenance log per asset (newest first on the detail view)

IMPORTANT:
- current_project_id is optional but must reference an existing project when sent.
- Deleting an asset removes its maintenance logs.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...activity import log_activity, serialize_model
from ...extensions import db
from ...forms import AssetForm, MaintenanceLogForm, bind_form
from ...models import Asset, MaintenanceLog, Project
from ...utils import arg_int, arg_str, invalid_form, mutation_response, server_failure, status_response

assets_bp = Blueprint("assets", __name__, url_prefix="/assets")


def _asset_dict(asset: Asset) -> dict:
    data = serialize_model(asset, exclude=("name_lowercase",))
    data["current_project_name"] = asset.current_project.name if asset.current_project else None
    return data


def _project_error(project_id: int | None):
    if project_id is not None and db.session.get(Project, project_id) is None:
        return mutation_response(
            "Invalid data provided.",
            errors={"current_project_id": ["Invalid project selected."]},
            status=400,
        )
    return None


def _apply_form(asset: Asset, form: AssetForm) -> None:
    asset.name = form.name.data.strip()
    asset.name_lowercase = asset.name.lower()
    asset.category = form.category.data.strip()
    asset.status = form.status.data
    asset.purchase_date = form.purchase_date.data
    asset.purchase_cost = form.purchase_cost.data
    asset.current_project_id = form.current_project_id.data
    asset.next_maintenance_date = form.next_maintenance_date.data


# ---------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------
@assets_bp.route("", methods=["GET"])
@login_required
def list_assets():
    q = Asset.query
    status = arg_str("status")
    if status:
        q = q.filter(Asset.status == status)
    project_id = arg_int("project_id")
    if project_id is not None:
        q = q.filter(Asset.current_project_id == project_id)
    assets = q.order_by(Asset.name.asc()).all()
    return jsonify({"assets": [_asset_dict(a) for a in assets]})


@assets_bp.route("", methods=["POST"])
@login_required
def create_asset():
    form = bind_form(AssetForm)
    if not form.validate():
        return invalid_form(form)

    error = _project_error(form.current_project_id.data)
    if error:
        return error

    asset = Asset()
    _apply_form(asset, form)

    try:
        db.session.add(asset)
        db.session.flush()
        log_activity(f"New asset added: {asset.name}", "ASSET_ADDED", f"/assets/{asset.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to add asset.")

    return mutation_response("Asset added successfully.", status=201, id=asset.id)


@assets_bp.route("/<int:asset_id>", methods=["GET"])
@login_required
def asset_detail(asset_id: int):
    asset = db.get_or_404(Asset, asset_id)

    data = _asset_dict(asset)
    data["maintenance_logs"] = [serialize_model(m) for m in asset.maintenance_logs]
    return jsonify(data)


@assets_bp.route("/<int:asset_id>", methods=["PUT", "POST"])
@login_required
def update_asset(asset_id: int):
    asset = db.get_or_404(Asset, asset_id)

    form = bind_form(AssetForm)
    if not form.validate():
        return invalid_form(form)

    error = _project_error(form.current_project_id.data)
    if error:
        return error

    try:
        _apply_form(asset, form)
        log_activity(f"Asset updated: {asset.name}", "ASSET_UPDATED", f"/assets/{asset.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to update asset.")

    return mutation_response("Asset updated successfully.")


@assets_bp.route("/<int:asset_id>", methods=["DELETE"])
@login_required
def delete_asset(asset_id: int):
    asset = db.get_or_404(Asset, asset_id)
    name = asset.name
    try:
        db.session.delete(asset)
        log_activity(f"Asset deleted: {name}", "ASSET_DELETED", "/assets")
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete asset.", envelope="status")
    return status_response(True, "Asset deleted successfully.")


# ---------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------
@assets_bp.route("/<int:asset_id>/maintenance", methods=["GET"])
@login_required
def list_maintenance(asset_id: int):
    asset = db.get_or_404(Asset, asset_id)
    return jsonify({"maintenance_logs": [serialize_model(m) for m in asset.maintenance_logs]})


@assets_bp.route("/<int:asset_id>/maintenance", methods=["POST"])
@login_required
def add_maintenance(asset_id: int):
    asset = db.get_or_404(Asset, asset_id)

    form = bind_form(MaintenanceLogForm)
    if not form.validate():
        return invalid_form(form)

    entry = MaintenanceLog(
        asset_id=asset.id,
        date=form.date.data,
        type=form.type.data.strip(),
        description=form.description.data.strip(),
        cost=form.cost.data,
        completed_by=(form.completed_by.data or "").strip() or None,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except Exception:
        return server_failure("Failed to add maintenance log.")

    return mutation_response("Maintenance log added successfully.", status=201, id=entry.id)
