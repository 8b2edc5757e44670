"""
mokawalat/blueprints/employees/routes.py

Employee directory routes

Includes:
- list / create / detail / update / delete (with photo upload)
- payroll overview and monthly payroll run (admin only)
- AI performance summary

IMPORTANT:
- Employees assigned to a project team cannot be deleted.
- A payroll period (YYYY-MM) can only be run once.
"""

from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from ...activity import log_activity, serialize_model
from ...ai import flows
from ...extensions import db
from ...forms import EmployeeForm, RunPayrollForm, bind_form
from ...ledger import record_transaction
from ...models import (
    Account,
    Employee,
    PayrollRun,
    PerformanceReview,
    TrainingRecord,
    TX_EXPENSE,
    _money,
    _to_decimal,
)
from ...security import admin_required
from ...storage import attach_upload, delete_upload, discard_upload, finish_upload
from ...utils import (
    arg_str,
    flow_response,
    invalid_form,
    mutation_response,
    server_failure,
    status_response,
)

employees_bp = Blueprint("employees", __name__, url_prefix="/employees")


def _employee_dict(employee: Employee) -> dict:
    return serialize_model(employee, exclude=("name_lowercase",))


def _email_taken(email: str, exclude_id: int | None = None) -> bool:
    q = Employee.query.filter(Employee.email == email)
    if exclude_id is not None:
        q = q.filter(Employee.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def _apply_form(employee: Employee, form: EmployeeForm) -> None:
    employee.name = form.name.data.strip()
    employee.name_lowercase = employee.name.lower()
    employee.email = form.email.data.strip().lower()
    employee.role = form.role.data.strip()
    employee.department = form.department.data.strip()
    employee.status = form.status.data
    employee.salary = form.salary.data


# ---------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------
@employees_bp.route("", methods=["GET"])
@login_required
def list_employees():
    q = Employee.query
    status = arg_str("status")
    if status:
        q = q.filter(Employee.status == status)
    department = arg_str("department")
    if department:
        q = q.filter(Employee.department == department)
    employees = q.order_by(Employee.name.asc()).all()
    return jsonify({"employees": [_employee_dict(e) for e in employees]})


@employees_bp.route("", methods=["POST"])
@login_required
def create_employee():
    form = bind_form(EmployeeForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    if _email_taken(form.email.data.strip().lower()):
        return mutation_response(
            "Invalid data provided.",
            errors={"email": ["An employee with this email already exists."]},
            status=400,
        )

    employee = Employee()
    _apply_form(employee, form)

    photo = None
    try:
        db.session.add(employee)
        db.session.flush()
        photo = attach_upload(employee, form.photo.data, "employees", "photo")
        log_activity(f"New employee hired: {employee.name}", "EMPLOYEE_HIRED", f"/employees/{employee.id}")
        db.session.commit()
    except Exception:
        discard_upload(photo)
        return server_failure("Failed to add employee.")

    return mutation_response("Employee added successfully.", status=201, id=employee.id)


@employees_bp.route("/<int:employee_id>", methods=["GET"])
@login_required
def employee_detail(employee_id: int):
    employee = db.get_or_404(Employee, employee_id)

    data = _employee_dict(employee)
    data["projects"] = [{"id": p.id, "name": p.name, "status": p.status} for p in employee.projects]
    data["trainings"] = [
        serialize_model(t)
        for t in TrainingRecord.query.filter_by(employee_id=employee.id)
        .order_by(TrainingRecord.completion_date.desc())
        .all()
    ]
    data["performance_reviews"] = [
        serialize_model(r)
        for r in PerformanceReview.query.filter_by(employee_id=employee.id)
        .order_by(PerformanceReview.review_date.desc())
        .all()
    ]
    return jsonify(data)


@employees_bp.route("/<int:employee_id>", methods=["PUT", "POST"])
@login_required
def update_employee(employee_id: int):
    employee = db.get_or_404(Employee, employee_id)

    form = bind_form(EmployeeForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    if _email_taken(form.email.data.strip().lower(), exclude_id=employee.id):
        return mutation_response(
            "Invalid data provided.",
            errors={"email": ["An employee with this email already exists."]},
            status=400,
        )

    photo = None
    try:
        _apply_form(employee, form)
        photo = attach_upload(employee, form.photo.data, "employees", "photo")
        log_activity(f"Employee updated: {employee.name}", "EMPLOYEE_UPDATED", f"/employees/{employee.id}")
        db.session.commit()
    except Exception:
        discard_upload(photo)
        return server_failure("Failed to update employee.")

    finish_upload(photo)

    return mutation_response("Employee updated successfully.")


@employees_bp.route("/<int:employee_id>", methods=["DELETE"])
@login_required
def delete_employee(employee_id: int):
    employee = db.get_or_404(Employee, employee_id)

    if employee.projects:
        return status_response(
            False,
            "Cannot delete employee assigned to one or more projects. Please remove them from project teams first.",
            status=409,
        )

    photo_path = employee.photo_path
    name = employee.name
    try:
        db.session.delete(employee)
        log_activity(f"Employee deleted: {name}", "EMPLOYEE_DELETED", "/employees")
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete employee.", envelope="status")

    delete_upload(photo_path)
    return status_response(True, "Employee deleted successfully.")


# ---------------------------------------------------------------------
# Payroll (admin only)
# ---------------------------------------------------------------------
def _payroll_employees():
    return (
        Employee.query.filter(Employee.status == "Active", Employee.salary > 0)
        .order_by(Employee.name.asc())
        .all()
    )


@employees_bp.route("/payroll", methods=["GET"])
@login_required
@admin_required
def payroll():
    employees = _payroll_employees()
    total = _money(sum((_to_decimal(e.salary) for e in employees), Decimal("0.00")))
    runs = PayrollRun.query.order_by(PayrollRun.period.desc()).limit(12).all()
    return jsonify(
        {
            "employees": [
                {"id": e.id, "name": e.name, "role": e.role, "department": e.department, "salary": float(e.salary)}
                for e in employees
            ],
            "total_payroll": float(total),
            "runs": [serialize_model(r) for r in runs],
        }
    )


@employees_bp.route("/payroll/run", methods=["POST"])
@login_required
@admin_required
def run_payroll():
    form = bind_form(RunPayrollForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    account = db.session.get(Account, form.account_id.data)
    if account is None:
        return mutation_response(
            "Invalid data provided.", errors={"account_id": ["Invalid account selected."]}, status=400
        )

    payroll_date = form.payroll_date.data
    period = payroll_date.strftime("%Y-%m")
    if PayrollRun.query.filter_by(period=period).first():
        return mutation_response(
            f"Payroll has already been run for {payroll_date.strftime('%B %Y')}.",
            errors={"_server": ["Duplicate payroll run prevented."]},
            status=409,
        )

    employees = _payroll_employees()
    if not employees:
        return mutation_response(
            "No active employees with salaries found to run payroll for.",
            errors={"_server": ["No employees to process."]},
            status=400,
        )

    total = Decimal("0.00")
    try:
        for employee in employees:
            record_transaction(
                description=f"Monthly Salary for {employee.name} ({period})",
                amount=employee.salary,
                type=TX_EXPENSE,
                date=payroll_date,
                account_id=account.id,
            )
            total += _to_decimal(employee.salary)

        db.session.add(
            PayrollRun(
                period=period,
                account_id=account.id,
                total_amount=_money(total),
                employee_count=len(employees),
                run_by_email=current_user.email,
            )
        )
        log_activity(
            f"Payroll run for {len(employees)} employees, totaling {_money(total):,}",
            "PAYROLL_RUN",
            "/financials",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to run payroll.")

    return mutation_response(f"Payroll run successfully for {len(employees)} employees.", status=201)


# ---------------------------------------------------------------------
# AI assist
# ---------------------------------------------------------------------
@employees_bp.route("/<int:employee_id>/ai/summary", methods=["POST"])
@login_required
def performance_summary(employee_id: int):
    employee = db.get_or_404(Employee, employee_id)
    return flow_response(lambda: flows.summarize_employee_performance(employee.id))
