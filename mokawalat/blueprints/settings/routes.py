"""
mokawalat/blueprints/settings/routes.py

Settings routes

Scope:
- Company profile (read: any signed-in user; write: admin only, with logo upload)
- User management: list users and change roles (admin only)
- Language preference (any signed-in user, stored on their profile)
- Warehouses and inventory categories (read: any signed-in user; write: admin only)

SECURITY:
- UI is never trusted. Role requirements are enforced here server-side.
- An admin cannot change their own role.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from ...activity import log_activity, serialize_model
from ...extensions import db
from ...forms import CategoryForm, CompanyProfileForm, LanguageForm, RoleForm, WarehouseForm, bind_form
from ...i18n import text_direction
from ...models import CompanyProfile, InventoryCategory, User, Warehouse
from ...security import admin_required
from ...storage import attach_upload, discard_upload, finish_upload
from ...utils import invalid_form, mutation_response, server_failure, status_response

settings_bp = Blueprint("settings", __name__, url_prefix="/settings")

COMPANY_PROFILE_ID = 1


def _user_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "role": user.role,
        "is_active": user.is_active,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


# ---------------------------------------------------------------------
# Company profile
# ---------------------------------------------------------------------
@settings_bp.route("/company", methods=["GET"])
@login_required
def company_profile():
    profile = db.session.get(CompanyProfile, COMPANY_PROFILE_ID)
    if profile is None:
        return jsonify({"company": None})
    return jsonify({"company": serialize_model(profile)})


@settings_bp.route("/company", methods=["POST", "PUT"])
@login_required
@admin_required
def update_company_profile():
    form = bind_form(CompanyProfileForm)
    if not form.validate():
        return invalid_form(form)

    profile = db.session.get(CompanyProfile, COMPANY_PROFILE_ID)
    if profile is None:
        profile = CompanyProfile(id=COMPANY_PROFILE_ID)
        db.session.add(profile)

    logo = None
    try:
        profile.name = form.name.data.strip()
        profile.address = (form.address.data or "").strip() or None
        profile.phone = (form.phone.data or "").strip() or None
        profile.email = (form.email.data or "").strip().lower() or None
        logo = attach_upload(profile, form.logo.data, "company", "logo")
        log_activity("Company profile updated", "COMPANY_PROFILE_UPDATED", "/settings")
        db.session.commit()
    except Exception:
        discard_upload(logo)
        return server_failure("Failed to update company profile.")

    finish_upload(logo)

    return mutation_response("Company profile updated successfully.", logo_url=profile.logo_url)


# ---------------------------------------------------------------------
# Users & roles
# ---------------------------------------------------------------------
@settings_bp.route("/users", methods=["GET"])
@login_required
@admin_required
def list_users():
    users = User.query.order_by(User.email.asc()).all()
    return jsonify({"users": [_user_dict(u) for u in users]})


@settings_bp.route("/users/<int:user_id>/role", methods=["PUT", "POST"])
@login_required
@admin_required
def update_user_role(user_id: int):
    user = db.get_or_404(User, user_id)

    form = bind_form(RoleForm)
    if not form.validate():
        return status_response(False, "Invalid role.")

    if user.id == current_user.id:
        return status_response(False, "You cannot change your own role.", status=409)

    try:
        user.role = form.role.data
        log_activity(f"Role for {user.email} changed to {user.role}", "USER_ROLE_CHANGED", "/settings/users")
        db.session.commit()
    except Exception:
        return server_failure("Failed to update role.", envelope="status")

    return status_response(True, f"Role for {user.email} updated to {user.role}.")


# ---------------------------------------------------------------------
# Warehouses & categories
# ---------------------------------------------------------------------
def _name_taken(model, name: str, exclude_id: int | None = None) -> bool:
    q = model.query.filter(model.name_lowercase == name.lower())
    if exclude_id is not None:
        q = q.filter(model.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def _duplicate_name(label: str):
    return mutation_response(
        "Invalid data provided.",
        errors={"name": [f"A {label} with this name already exists."]},
        status=400,
    )


@settings_bp.route("/warehouses", methods=["GET"])
@login_required
def list_warehouses():
    rows = Warehouse.query.order_by(Warehouse.name.asc()).all()
    return jsonify({"warehouses": [serialize_model(w, exclude=("name_lowercase",)) for w in rows]})


@settings_bp.route("/warehouses", methods=["POST"])
@login_required
@admin_required
def add_warehouse():
    form = bind_form(WarehouseForm)
    if not form.validate():
        return invalid_form(form)

    name = form.name.data.strip()
    if _name_taken(Warehouse, name):
        return _duplicate_name("warehouse")

    warehouse = Warehouse(
        name=name,
        name_lowercase=name.lower(),
        location=(form.location.data or "").strip() or None,
    )
    try:
        db.session.add(warehouse)
        db.session.commit()
    except Exception:
        return server_failure("Failed to add warehouse.")

    return mutation_response("Warehouse added successfully.", status=201, id=warehouse.id)


@settings_bp.route("/warehouses/<int:warehouse_id>", methods=["PUT", "POST"])
@login_required
@admin_required
def update_warehouse(warehouse_id: int):
    warehouse = db.get_or_404(Warehouse, warehouse_id)

    form = bind_form(WarehouseForm)
    if not form.validate():
        return invalid_form(form)

    name = form.name.data.strip()
    if _name_taken(Warehouse, name, exclude_id=warehouse.id):
        return _duplicate_name("warehouse")

    try:
        warehouse.name = name
        warehouse.name_lowercase = name.lower()
        warehouse.location = (form.location.data or "").strip() or None
        db.session.commit()
    except Exception:
        return server_failure("Failed to update warehouse.")

    return mutation_response("Warehouse updated successfully.")


@settings_bp.route("/warehouses/<int:warehouse_id>", methods=["DELETE"])
@login_required
@admin_required
def delete_warehouse(warehouse_id: int):
    warehouse = db.get_or_404(Warehouse, warehouse_id)
    try:
        db.session.delete(warehouse)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete warehouse.", envelope="status")
    return status_response(True, "Warehouse deleted successfully.")


@settings_bp.route("/categories", methods=["GET"])
@login_required
def list_categories():
    rows = InventoryCategory.query.order_by(InventoryCategory.name.asc()).all()
    return jsonify({"categories": [serialize_model(c, exclude=("name_lowercase",)) for c in rows]})


@settings_bp.route("/categories", methods=["POST"])
@login_required
@admin_required
def add_category():
    form = bind_form(CategoryForm)
    if not form.validate():
        return invalid_form(form)

    name = form.name.data.strip()
    if _name_taken(InventoryCategory, name):
        return _duplicate_name("category")

    category = InventoryCategory(name=name, name_lowercase=name.lower())
    try:
        db.session.add(category)
        db.session.commit()
    except Exception:
        return server_failure("Failed to add category.")

    return mutation_response("Category added successfully.", status=201, id=category.id)


@settings_bp.route("/categories/<int:category_id>", methods=["PUT", "POST"])
@login_required
@admin_required
def update_category(category_id: int):
    category = db.get_or_404(InventoryCategory, category_id)

    form = bind_form(CategoryForm)
    if not form.validate():
        return invalid_form(form)

    name = form.name.data.strip()
    if _name_taken(InventoryCategory, name, exclude_id=category.id):
        return _duplicate_name("category")

    try:
        category.name = name
        category.name_lowercase = name.lower()
        db.session.commit()
    except Exception:
        return server_failure("Failed to update category.")

    return mutation_response("Category updated successfully.")


@settings_bp.route("/categories/<int:category_id>", methods=["DELETE"])
@login_required
@admin_required
def delete_category(category_id: int):
    category = db.get_or_404(InventoryCategory, category_id)
    try:
        db.session.delete(category)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete category.", envelope="status")
    return status_response(True, "Category deleted successfully.")


# ---------------------------------------------------------------------
# Language
# ---------------------------------------------------------------------
@settings_bp.route("/language", methods=["PUT", "POST"])
@login_required
def update_language():
    form = bind_form(LanguageForm)
    if not form.validate():
        return status_response(False, "Unsupported language.")

    try:
        current_user.locale = form.locale.data
        db.session.commit()
    except Exception:
        return server_failure("Failed to update language.", envelope="status")

    return status_response(
        True, "Language updated.", locale=current_user.locale, direction=text_direction(current_user.locale)
    )
