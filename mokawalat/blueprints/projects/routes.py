"""
mokawalat/blueprints/projects/routes.py

Project routes

Includes:
- list / create / detail / update / delete
- team assignment
- daily logs
- material requests raised from a project
- AI assist: risk analysis, task suggestions, daily-log summary

IMPORTANT:
- UI is never trusted. Validation and referential checks are server-side.
- Every mutation commits once, after its activity entry is added.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from ...activity import log_activity, serialize_model
from ...ai import flows
from ...extensions import db
from ...forms import DailyLogForm, MaterialRequestForm, ProjectForm, TeamForm, bind_form
from ...models import Client, DailyLog, Employee, InventoryItem, MaterialRequest, Project
from ...utils import (
    arg_str,
    flow_response,
    invalid_form,
    mutation_response,
    server_failure,
    status_response,
)

projects_bp = Blueprint("projects", __name__, url_prefix="/projects")


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def _project_dict(project: Project, *, detail: bool = False) -> dict:
    data = serialize_model(project, exclude=("name_lowercase",))
    data["client_name"] = project.client.name if project.client else None
    data["team_member_ids"] = [e.id for e in project.team_members]
    if detail:
        data["team_members"] = [
            {"id": e.id, "name": e.name, "role": e.role, "photo_url": e.photo_url} for e in project.team_members
        ]
        data["total_expense"] = float(project.total_expense())
        data["budget_usage_percent"] = float(project.budget_usage_percent())
    return data


def _resolve_team(employee_ids: list[int]) -> tuple[list[Employee], list[int]]:
    """Return (employees, unknown_ids) for the requested ids (duplicates dropped)."""
    wanted = list(dict.fromkeys(employee_ids))
    if not wanted:
        return [], []
    found = Employee.query.filter(Employee.id.in_(wanted)).all()
    by_id = {e.id: e for e in found}
    unknown = [i for i in wanted if i not in by_id]
    return [by_id[i] for i in wanted if i in by_id], unknown


def _apply_form(project: Project, form: ProjectForm) -> dict | None:
    """Copy validated fields onto project. Returns a field-error map on bad references."""
    if form.client_id.data is not None and db.session.get(Client, form.client_id.data) is None:
        return {"client_id": ["Invalid client selected."]}

    project.name = form.name.data.strip()
    project.name_lowercase = project.name.lower()
    project.description = (form.description.data or "").strip() or None
    project.location = (form.location.data or "").strip() or None
    project.budget = form.budget.data
    project.start_date = form.start_date.data
    project.status = form.status.data
    project.progress = form.progress.data or 0
    project.client_id = form.client_id.data

    if form.team_member_ids.raw_data:
        team, unknown = _resolve_team(form.team_member_ids.data)
        if unknown:
            return {"team_member_ids": [f"Unknown employee id(s): {', '.join(map(str, unknown))}."]}
        project.team_members = team
    return None


# ---------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------
@projects_bp.route("", methods=["GET"])
@login_required
def list_projects():
    q = Project.query
    status = arg_str("status")
    if status:
        q = q.filter(Project.status == status)
    projects = q.order_by(Project.created_at.desc(), Project.id.desc()).all()
    return jsonify({"projects": [_project_dict(p) for p in projects]})


@projects_bp.route("", methods=["POST"])
@login_required
def create_project():
    form = bind_form(ProjectForm)
    if not form.validate():
        return invalid_form(form)

    project = Project()
    errors = _apply_form(project, form)
    if errors:
        return mutation_response("Invalid data provided. Please check the form.", errors=errors, status=400)

    try:
        db.session.add(project)
        db.session.flush()
        log_activity(f"New project created: {project.name}", "PROJECT_CREATED", f"/projects/{project.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to add project.")

    return mutation_response("Project added successfully.", status=201, id=project.id)


@projects_bp.route("/<int:project_id>", methods=["GET"])
@login_required
def project_detail(project_id: int):
    project = db.get_or_404(Project, project_id)
    return jsonify(_project_dict(project, detail=True))


@projects_bp.route("/<int:project_id>", methods=["PUT", "POST"])
@login_required
def update_project(project_id: int):
    project = db.get_or_404(Project, project_id)

    form = bind_form(ProjectForm)
    if not form.validate():
        return invalid_form(form)

    errors = _apply_form(project, form)
    if errors:
        db.session.rollback()
        return mutation_response("Invalid data provided. Please check the form.", errors=errors, status=400)

    try:
        db.session.commit()
    except Exception:
        return server_failure("Failed to update project.")

    return mutation_response("Project updated successfully.")


@projects_bp.route("/<int:project_id>", methods=["DELETE"])
@login_required
def delete_project(project_id: int):
    project = db.get_or_404(Project, project_id)
    try:
        db.session.delete(project)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete project.", envelope="status")
    return status_response(True, "Project deleted successfully.")


# ---------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------
@projects_bp.route("/<int:project_id>/team", methods=["PUT", "POST"])
@login_required
def assign_team(project_id: int):
    project = db.get_or_404(Project, project_id)

    form = bind_form(TeamForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    team, unknown = _resolve_team(form.employee_ids.data)
    if unknown:
        return mutation_response(
            "Invalid data provided.",
            errors={"employee_ids": [f"Unknown employee id(s): {', '.join(map(str, unknown))}."]},
            status=400,
        )

    try:
        project.team_members = team
        db.session.commit()
    except Exception:
        return server_failure("Failed to assign team.")

    return mutation_response("Team updated successfully.", team_member_ids=[e.id for e in team])


# ---------------------------------------------------------------------
# Daily logs
# ---------------------------------------------------------------------
@projects_bp.route("/<int:project_id>/logs", methods=["GET"])
@login_required
def list_daily_logs(project_id: int):
    project = db.get_or_404(Project, project_id)
    return jsonify({"logs": [serialize_model(log) for log in project.daily_logs]})


@projects_bp.route("/<int:project_id>/logs", methods=["POST"])
@login_required
def add_daily_log(project_id: int):
    project = db.get_or_404(Project, project_id)

    form = bind_form(DailyLogForm)
    if not form.validate():
        return invalid_form(form)

    log = DailyLog(
        project_id=project.id,
        notes=form.notes.data.strip(),
        author_id=current_user.id,
        author_email=current_user.email,
    )
    try:
        db.session.add(log)
        db.session.commit()
    except Exception:
        return server_failure("Failed to add daily log.")

    return mutation_response("Daily log added successfully.", status=201, id=log.id)


# ---------------------------------------------------------------------
# Material requests
# ---------------------------------------------------------------------
@projects_bp.route("/<int:project_id>/material-requests", methods=["GET"])
@login_required
def list_project_material_requests(project_id: int):
    project = db.get_or_404(Project, project_id)
    rows = (
        MaterialRequest.query.filter_by(project_id=project.id)
        .order_by(MaterialRequest.requested_at.desc())
        .all()
    )
    return jsonify({"material_requests": [serialize_model(r) for r in rows]})


@projects_bp.route("/<int:project_id>/material-requests", methods=["POST"])
@login_required
def create_material_request(project_id: int):
    project = db.get_or_404(Project, project_id)

    form = bind_form(MaterialRequestForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    item = db.session.get(InventoryItem, form.item_id.data)
    if item is None:
        return mutation_response(
            "Selected inventory item not found.", errors={"item_id": ["Invalid item selected."]}, status=400
        )

    material_request = MaterialRequest(
        project_id=project.id,
        item_id=item.id,
        item_name=item.name,
        quantity=form.quantity.data,
        status="Pending",
    )
    try:
        db.session.add(material_request)
        db.session.flush()
        log_activity(
            f"Material request for {item.name} created for project {project.name}",
            "MATERIAL_REQUESTED",
            "/material-requests",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to submit material request.")

    return mutation_response("Material request submitted successfully.", status=201, id=material_request.id)


# ---------------------------------------------------------------------
# AI assist
# ---------------------------------------------------------------------
@projects_bp.route("/<int:project_id>/ai/risks", methods=["POST"])
@login_required
def analyze_risks(project_id: int):
    project = db.get_or_404(Project, project_id)
    data = flows.ProjectRiskAnalysisInput(
        name=project.name,
        description=project.description or "",
        budget=float(project.budget or 0),
        location=project.location or "",
    )
    return flow_response(lambda: flows.analyze_project_risks(data), "Risk analysis generated.")


@projects_bp.route("/<int:project_id>/ai/tasks", methods=["POST"])
@login_required
def suggest_tasks(project_id: int):
    project = db.get_or_404(Project, project_id)
    data = flows.SuggestProjectTasksInput(
        project_name=project.name,
        project_description=project.description or "",
    )
    return flow_response(lambda: flows.suggest_project_tasks(data), "Tasks suggested.")


@projects_bp.route("/<int:project_id>/ai/log-summary", methods=["POST"])
@login_required
def summarize_logs(project_id: int):
    project = db.get_or_404(Project, project_id)
    return flow_response(lambda: flows.summarize_daily_logs(project.id))
