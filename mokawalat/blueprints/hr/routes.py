"""
mokawalat/blueprints/hr/routes.py

HR routes

Includes:
- recruitment: jobs CRUD, candidates (with resume upload) and their pipeline status
- training records (with certificate upload)
- performance reviews (reviewer is the signed-in user)
- offboarding
- leave requests (manager approves or rejects) and attendance check-in/check-out

IMPORTANT:
- Moving a candidate to Hired creates the Employee record in the same commit.
- Offboarding marks the employee Inactive in the same commit as the record.
- Only Pending leave requests can be actioned.
- An employee has at most one open check-in per day.
"""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from ...activity import log_activity, serialize_model
from ...extensions import db
from ...forms import (
    CandidateForm,
    CandidateStatusForm,
    CheckInForm,
    JobForm,
    LeaveRequestForm,
    LeaveStatusForm,
    OffboardingForm,
    PerformanceReviewForm,
    TrainingForm,
    bind_form,
)
from ...models import (
    AttendanceRecord,
    Candidate,
    Employee,
    Job,
    LeaveRequest,
    OffboardingRecord,
    PerformanceReview,
    TrainingRecord,
)
from ...security import manager_required
from ...storage import attach_upload, delete_upload, discard_upload
from ...utils import (
    arg_int,
    arg_str,
    invalid_form,
    mutation_response,
    server_failure,
    status_response,
)

hr_bp = Blueprint("hr", __name__, url_prefix="/hr")


def _employee_or_error(employee_id: int):
    employee = db.session.get(Employee, employee_id)
    if employee is None:
        return None, mutation_response(
            "Invalid data provided.", errors={"employee_id": ["Invalid employee selected."]}, status=400
        )
    return employee, None


# ---------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------
@hr_bp.route("/jobs", methods=["GET"])
@login_required
def list_jobs():
    q = Job.query
    status = arg_str("status")
    if status:
        q = q.filter(Job.status == status)
    jobs = q.order_by(Job.created_at.desc(), Job.id.desc()).all()
    return jsonify(
        {
            "jobs": [
                dict(serialize_model(j, exclude=("title_lowercase",)), candidate_count=len(j.candidates))
                for j in jobs
            ]
        }
    )


@hr_bp.route("/jobs", methods=["POST"])
@login_required
def create_job():
    form = bind_form(JobForm)
    if not form.validate():
        return invalid_form(form)

    job = Job(
        title=form.title.data.strip(),
        description=form.description.data.strip(),
        department=form.department.data.strip(),
        status=form.status.data,
    )
    job.title_lowercase = job.title.lower()

    try:
        db.session.add(job)
        db.session.flush()
        log_activity(f"New job posted: {job.title}", "JOB_POSTED", "/hr/recruitment")
        db.session.commit()
    except Exception:
        return server_failure("Failed to add job.")

    return mutation_response("Job added successfully.", status=201, id=job.id)


@hr_bp.route("/jobs/<int:job_id>", methods=["GET"])
@login_required
def job_detail(job_id: int):
    job = db.get_or_404(Job, job_id)
    data = serialize_model(job, exclude=("title_lowercase",))
    data["candidates"] = [serialize_model(c) for c in job.candidates]
    return jsonify(data)


@hr_bp.route("/jobs/<int:job_id>", methods=["PUT", "POST"])
@login_required
def update_job(job_id: int):
    job = db.get_or_404(Job, job_id)

    form = bind_form(JobForm)
    if not form.validate():
        return invalid_form(form)

    try:
        job.title = form.title.data.strip()
        job.title_lowercase = job.title.lower()
        job.description = form.description.data.strip()
        job.department = form.department.data.strip()
        job.status = form.status.data
        db.session.commit()
    except Exception:
        return server_failure("Failed to update job.")

    return mutation_response("Job updated successfully.")


@hr_bp.route("/jobs/<int:job_id>", methods=["DELETE"])
@login_required
def delete_job(job_id: int):
    job = db.get_or_404(Job, job_id)

    if job.candidates:
        return status_response(False, "Cannot delete a job that has candidates.", status=409)

    try:
        db.session.delete(job)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete job.", envelope="status")
    return status_response(True, "Job deleted successfully.")


# ---------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------
@hr_bp.route("/candidates", methods=["GET"])
@login_required
def list_candidates():
    q = Candidate.query
    job_id = arg_int("job_id")
    if job_id is not None:
        q = q.filter(Candidate.job_id == job_id)
    status = arg_str("status")
    if status:
        q = q.filter(Candidate.status == status)
    rows = q.order_by(Candidate.applied_at.desc(), Candidate.id.desc()).all()
    return jsonify({"candidates": [serialize_model(c) for c in rows]})


@hr_bp.route("/candidates", methods=["POST"])
@login_required
def add_candidate():
    form = bind_form(CandidateForm)
    if not form.validate():
        return invalid_form(form)

    job = db.session.get(Job, form.job_id.data)
    if job is None:
        return mutation_response("Invalid data provided.", errors={"job_id": ["Invalid job selected."]}, status=400)

    candidate = Candidate(
        job_id=job.id,
        name=form.name.data.strip(),
        email=form.email.data.strip().lower(),
        phone=form.phone.data.strip(),
        status="Applied",
    )
    resume = None
    try:
        db.session.add(candidate)
        db.session.flush()
        resume = attach_upload(candidate, form.resume.data, "candidates", "resume")
        log_activity(
            f"New candidate {candidate.name} applied for {job.title}",
            "CANDIDATE_ADDED",
            "/hr/recruitment",
        )
        db.session.commit()
    except Exception:
        discard_upload(resume)
        return server_failure("Failed to add candidate.")

    return mutation_response("Candidate added successfully.", status=201, id=candidate.id)


@hr_bp.route("/candidates/<int:candidate_id>/status", methods=["PUT", "POST"])
@login_required
def update_candidate_status(candidate_id: int):
    candidate = db.get_or_404(Candidate, candidate_id)

    form = bind_form(CandidateStatusForm)
    if not form.validate():
        return status_response(False, "Invalid status.")
    new_status = form.status.data

    if candidate.status == "Hired":
        return status_response(False, "This candidate has already been hired.", status=409)

    employee = None
    if new_status == "Hired":
        if Employee.query.filter_by(email=candidate.email).first() is not None:
            return status_response(False, "An employee with this email already exists.", status=409)
        job = candidate.job
        employee = Employee(
            name=candidate.name,
            name_lowercase=candidate.name.lower(),
            email=candidate.email,
            role=job.title if job else "New Hire",
            department=job.department if job else "General",
            status="Active",
        )

    try:
        candidate.status = new_status
        if employee is not None:
            db.session.add(employee)
            db.session.flush()
            log_activity(f"New employee hired: {employee.name}", "EMPLOYEE_HIRED", f"/employees/{employee.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to update candidate status.", envelope="status")

    if employee is not None:
        return status_response(
            True, f"{candidate.name} has been hired and added to employees.", employee_id=employee.id
        )
    return status_response(True, f"Candidate status updated to {new_status}.")


@hr_bp.route("/candidates/<int:candidate_id>", methods=["DELETE"])
@login_required
def delete_candidate(candidate_id: int):
    candidate = db.get_or_404(Candidate, candidate_id)
    resume_path = candidate.resume_path
    try:
        db.session.delete(candidate)
        db.session.commit()
    except Exception:
        return server_failure("Failed to delete candidate.", envelope="status")

    delete_upload(resume_path)
    return status_response(True, "Candidate deleted successfully.")


# ---------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------
@hr_bp.route("/training", methods=["GET"])
@login_required
def list_training():
    q = TrainingRecord.query
    employee_id = arg_int("employee_id")
    if employee_id is not None:
        q = q.filter(TrainingRecord.employee_id == employee_id)
    rows = q.order_by(TrainingRecord.completion_date.desc()).all()
    return jsonify({"training": [serialize_model(t) for t in rows]})


@hr_bp.route("/training", methods=["POST"])
@login_required
def add_training():
    form = bind_form(TrainingForm)
    if not form.validate():
        return invalid_form(form)

    employee, error = _employee_or_error(form.employee_id.data)
    if error:
        return error

    record = TrainingRecord(
        employee_id=employee.id,
        employee_name=employee.name,
        course_name=form.course_name.data.strip(),
        completion_date=form.completion_date.data,
    )
    certificate = None
    try:
        db.session.add(record)
        db.session.flush()
        certificate = attach_upload(record, form.certificate.data, "training", "certificate")
        log_activity(
            f"{employee.name} completed training: {record.course_name}",
            "TRAINING_ADDED",
            f"/employees/{employee.id}",
        )
        db.session.commit()
    except Exception:
        discard_upload(certificate)
        return server_failure("Failed to add training record.")

    return mutation_response("Training record added successfully.", status=201, id=record.id)


# ---------------------------------------------------------------------
# Performance reviews
# ---------------------------------------------------------------------
@hr_bp.route("/performance", methods=["GET"])
@login_required
def list_reviews():
    q = PerformanceReview.query
    employee_id = arg_int("employee_id")
    if employee_id is not None:
        q = q.filter(PerformanceReview.employee_id == employee_id)
    rows = q.order_by(PerformanceReview.review_date.desc()).all()
    return jsonify({"reviews": [serialize_model(r) for r in rows]})


@hr_bp.route("/performance", methods=["POST"])
@login_required
def add_review():
    form = bind_form(PerformanceReviewForm)
    if not form.validate():
        return invalid_form(form)

    employee, error = _employee_or_error(form.employee_id.data)
    if error:
        return error

    review = PerformanceReview(
        employee_id=employee.id,
        employee_name=employee.name,
        reviewer_id=current_user.id,
        reviewer_email=current_user.email,
        review_date=form.review_date.data,
        rating=form.rating.data,
        goals=form.goals.data.strip(),
        feedback=form.feedback.data.strip(),
    )
    try:
        db.session.add(review)
        db.session.flush()
        log_activity(
            f"Performance review added for {employee.name}",
            "PERFORMANCE_REVIEW_ADDED",
            f"/employees/{employee.id}",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to add performance review.")

    return mutation_response("Performance review added successfully.", status=201, id=review.id)


# ---------------------------------------------------------------------
# Offboarding
# ---------------------------------------------------------------------
@hr_bp.route("/offboarding", methods=["GET"])
@login_required
def list_offboarding():
    rows = OffboardingRecord.query.order_by(OffboardingRecord.exit_date.desc()).all()
    return jsonify(
        {
            "offboarding": [
                dict(serialize_model(r), employee_name=r.employee.name if r.employee else None) for r in rows
            ]
        }
    )


@hr_bp.route("/offboarding", methods=["POST"])
@login_required
def offboard_employee():
    form = bind_form(OffboardingForm)
    if not form.validate():
        return invalid_form(form)

    employee, error = _employee_or_error(form.employee_id.data)
    if error:
        return error
    if employee.status == "Inactive":
        return mutation_response(
            "Employee has already been offboarded.",
            errors={"employee_id": ["Employee is already inactive."]},
            status=409,
        )

    record = OffboardingRecord(
        employee_id=employee.id,
        exit_date=form.exit_date.data,
        reason=form.reason.data.strip(),
        feedback=(form.feedback.data or "").strip() or None,
        assets_returned=bool(form.assets_returned.data),
    )
    try:
        db.session.add(record)
        employee.status = "Inactive"
        log_activity(f"Employee offboarded: {employee.name}", "EMPLOYEE_OFFBOARDED", f"/employees/{employee.id}")
        db.session.commit()
    except Exception:
        return server_failure("Failed to process offboarding.")

    return mutation_response("Offboarding processed successfully.", status=201, id=record.id)


# ---------------------------------------------------------------------
# Leave requests
# ---------------------------------------------------------------------
@hr_bp.route("/leave", methods=["GET"])
@login_required
def list_leave_requests():
    q = LeaveRequest.query
    status = arg_str("status")
    if status:
        q = q.filter(LeaveRequest.status == status)
    employee_id = arg_int("employee_id")
    if employee_id is not None:
        q = q.filter(LeaveRequest.employee_id == employee_id)
    rows = q.order_by(LeaveRequest.requested_at.desc(), LeaveRequest.id.desc()).all()
    return jsonify({"leave_requests": [serialize_model(r) for r in rows]})


@hr_bp.route("/leave", methods=["POST"])
@login_required
def request_leave():
    form = bind_form(LeaveRequestForm)
    if not form.validate():
        return invalid_form(form)

    if form.end_date.data < form.start_date.data:
        return mutation_response(
            "Invalid data provided.",
            errors={"end_date": ["End date cannot be before the start date."]},
            status=400,
        )

    employee, error = _employee_or_error(form.employee_id.data)
    if error:
        return error

    leave = LeaveRequest(
        employee_id=employee.id,
        employee_name=employee.name,
        leave_type=form.leave_type.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        reason=(form.reason.data or "").strip() or None,
    )
    try:
        db.session.add(leave)
        db.session.flush()
        log_activity(f"Leave request submitted by {employee.name}", "LEAVE_REQUEST_CREATED", "/hr/leave")
        db.session.commit()
    except Exception:
        return server_failure("Failed to submit leave request.")

    return mutation_response("Leave request submitted successfully.", status=201, id=leave.id)


@hr_bp.route("/leave/<int:leave_id>/status", methods=["POST", "PUT"])
@login_required
@manager_required
def update_leave_status(leave_id: int):
    leave = db.get_or_404(LeaveRequest, leave_id)

    form = bind_form(LeaveStatusForm)
    if not form.validate():
        return status_response(False, "Invalid status.")

    if leave.status != "Pending":
        return status_response(False, "This request has already been actioned.", status=409)

    new_status = form.status.data
    try:
        leave.status = new_status
        log_activity(
            f"Leave request for {leave.employee_name} was {new_status.lower()}",
            "LEAVE_REQUEST_APPROVED" if new_status == "Approved" else "LEAVE_REQUEST_REJECTED",
            "/hr/leave",
        )
        db.session.commit()
    except Exception:
        return server_failure("Failed to update request status.", envelope="status")

    return status_response(True, f"Request status updated to {new_status}.")


# ---------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------
@hr_bp.route("/attendance", methods=["GET"])
@login_required
def list_attendance():
    q = AttendanceRecord.query
    employee_id = arg_int("employee_id")
    if employee_id is not None:
        q = q.filter(AttendanceRecord.employee_id == employee_id)
    rows = q.order_by(AttendanceRecord.check_in_time.desc(), AttendanceRecord.id.desc()).all()
    return jsonify({"attendance": [serialize_model(r) for r in rows]})


@hr_bp.route("/attendance/check-in", methods=["POST"])
@login_required
def check_in():
    form = bind_form(CheckInForm)
    if not form.validate():
        return invalid_form(form)

    employee, error = _employee_or_error(form.employee_id.data)
    if error:
        return error

    now = datetime.utcnow()
    open_record = AttendanceRecord.query.filter(
        AttendanceRecord.employee_id == employee.id,
        AttendanceRecord.date == now.date(),
        AttendanceRecord.check_out_time.is_(None),
    ).first()
    if open_record is not None:
        return mutation_response(
            f"{employee.name} is already checked in.",
            errors={"employee_id": ["Employee is already checked in."]},
            status=409,
        )

    record = AttendanceRecord(
        employee_id=employee.id,
        employee_name=employee.name,
        date=now.date(),
        check_in_time=now,
        status="Present",
    )
    try:
        db.session.add(record)
        db.session.flush()
        log_activity(f"Employee {employee.name} checked in.", "ATTENDANCE_CHECK_IN", "/hr/attendance")
        db.session.commit()
    except Exception:
        return server_failure("Failed to check in.")

    return mutation_response("Checked in successfully.", status=201, id=record.id)


@hr_bp.route("/attendance/<int:record_id>/check-out", methods=["POST"])
@login_required
def check_out(record_id: int):
    record = db.get_or_404(AttendanceRecord, record_id)

    if record.check_out_time is not None:
        return status_response(False, "This attendance record is already checked out.", status=409)

    try:
        record.check_out_time = datetime.utcnow()
        log_activity(f"Employee {record.employee_name} checked out.", "ATTENDANCE_CHECK_OUT", "/hr/attendance")
        db.session.commit()
    except Exception:
        return server_failure("Failed to check out.", envelope="status")

    return status_response(True, "Checked out successfully.")
