"""
mokawalat/forms.py

WTForms form classes for every create/update operation.

Forms are bound with bind_form(), which accepts either a JSON body or a
form-encoded / multipart body:
- JSON objects are flattened into a MultiDict (nested lists of objects use
  WTForms' "<name>-<index>-<field>" naming, so FieldList(FormField(...)) works).
- Multipart bodies combine request.files and request.form so file fields see
  the uploaded FileStorage.

IMPORTANT:
- CSRF is enforced app-wide by CSRFProtect; forms here are plain wtforms.Form.
- form.errors is the field -> [messages] map returned to clients.
"""

from __future__ import annotations

from decimal import Decimal

from flask import current_app, request
from flask_wtf.file import FileField
from werkzeug.datastructures import CombinedMultiDict, MultiDict
from wtforms import (
    BooleanField,
    DateField,
    DecimalField,
    Field,
    FieldList,
    Form,
    FormField,
    IntegerField,
    SelectField,
    StringField,
    TextAreaField,
)
from wtforms.validators import (
    DataRequired,
    Email,
    InputRequired,
    Length,
    NumberRange,
    Optional,
    ValidationError,
)

from .models import ROLES, STOCK_IN, STOCK_LOW, STOCK_OUT
from .storage import file_too_large

PROJECT_STATUSES = ["Planning", "In Progress", "Completed", "On Hold"]
EMPLOYEE_STATUSES = ["Active", "On Leave", "Inactive"]
CLIENT_STATUSES = ["Lead", "Active", "Inactive"]
INTERACTION_TYPES = ["Call", "Email", "Meeting", "Note"]
SUPPLIER_STATUSES = ["Active", "Inactive"]
STOCK_STATUSES = [STOCK_IN, STOCK_LOW, STOCK_OUT]
TRANSACTION_TYPES = ["Income", "Expense"]
JOB_STATUSES = ["Open", "Closed"]
CANDIDATE_STATUSES = ["Applied", "Interviewing", "Offered", "Hired", "Rejected"]
LEAVE_TYPES = ["Annual", "Sick", "Unpaid", "Other"]
ASSET_STATUSES = ["Available", "In Use", "Under Maintenance", "Decommissioned"]
LOCALES = ["en", "ar"]


def _choices(values):
    return [(v, v) for v in values]


# ---------------------------------------------------------------------
# Request binding
# ---------------------------------------------------------------------
def _scalar(value) -> str:
    if isinstance(value, bool):
        return "y" if value else ""
    return str(value)


def _flatten(payload: dict, prefix: str = "") -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    for key, value in payload.items():
        name = f"{prefix}{key}"
        if value is None:
            continue
        if isinstance(value, dict):
            items.extend(_flatten(value, f"{name}-"))
        elif isinstance(value, list):
            for index, element in enumerate(value):
                if isinstance(element, dict):
                    items.extend(_flatten(element, f"{name}-{index}-"))
                elif element is not None:
                    items.append((name, _scalar(element)))
        else:
            items.append((name, _scalar(value)))
    return items


def request_formdata():
    if request.is_json:
        payload = request.get_json(silent=True)
        return MultiDict(_flatten(payload if isinstance(payload, dict) else {}))
    if request.files:
        return CombinedMultiDict((request.files, request.form))
    return request.form


def bind_form(form_cls, **kwargs):
    """Instantiate form_cls from the current request body."""
    return form_cls(formdata=request_formdata(), **kwargs)


# ---------------------------------------------------------------------
# Custom fields / validators
# ---------------------------------------------------------------------
class IntegerListField(Field):
    """Repeated integer values, e.g. employee_ids=1&employee_ids=2 or a JSON list."""

    def _value(self):
        return ",".join(str(v) for v in (self.data or []))

    def process_data(self, value):
        self.data = list(value or [])

    def process_formdata(self, valuelist):
        self.data = []
        for raw in valuelist:
            for part in str(raw).split(","):
                part = part.strip()
                if not part:
                    continue
                try:
                    self.data.append(int(part))
                except ValueError as exc:
                    raise ValueError(self.gettext("Not a valid integer value.")) from exc


def positive(message: str = "Must be a positive number."):
    def _check(form, field):
        if field.data is not None and field.data <= 0:
            raise ValidationError(message)

    return _check


def non_zero(form, field):
    if field.data == 0:
        raise ValidationError("Adjustment cannot be zero.")


def max_upload_size(form, field):
    if file_too_large(field.data):
        limit_mb = current_app.config["MAX_UPLOAD_BYTES"] // (1024 * 1024)
        raise ValidationError(f"File must be {limit_mb}MB or smaller.")


def _valid_date(message: str = "Please select a valid date."):
    return DateField(format="%Y-%m-%d", validators=[InputRequired(message)])


def _required_id(message: str):
    return IntegerField(validators=[InputRequired(message)])


# ---------------------------------------------------------------------
# Auth / profile
# ---------------------------------------------------------------------
class SignupForm(Form):
    email = StringField(validators=[DataRequired(), Email("Please enter a valid email address.")])
    password = StringField(validators=[DataRequired(), Length(min=6, message="Password must be at least 6 characters long.")])
    display_name = StringField(validators=[Optional(), Length(max=120)])


class LoginForm(Form):
    email = StringField(validators=[DataRequired(), Email("Please enter a valid email address.")])
    password = StringField(validators=[DataRequired("Password is required.")])


class ForgotPasswordForm(Form):
    email = StringField(validators=[DataRequired(), Email("Please enter a valid email address.")])


class ResetPasswordForm(Form):
    token = StringField(validators=[DataRequired("Reset token is required.")])
    password = StringField(validators=[DataRequired(), Length(min=6, message="Password must be at least 6 characters long.")])


class RoleForm(Form):
    role = SelectField(choices=_choices(ROLES), validators=[InputRequired()])


class LanguageForm(Form):
    locale = SelectField(choices=_choices(LOCALES), validators=[InputRequired()])


class CompanyProfileForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Company name must be at least 2 characters long.")])
    address = StringField(validators=[Optional()])
    phone = StringField(validators=[Optional()])
    email = StringField(validators=[Optional(), Email("Please enter a valid email address.")])
    logo = FileField(validators=[Optional(), max_upload_size])


# ---------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------
class ProjectForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=3, message="Project name must be at least 3 characters long.")])
    description = TextAreaField(validators=[Optional()])
    location = StringField(validators=[Optional()])
    budget = DecimalField(validators=[InputRequired(), positive("Budget must be a positive number.")])
    start_date = _valid_date()
    status = SelectField(choices=_choices(PROJECT_STATUSES), default="Planning")
    progress = IntegerField(default=0, validators=[Optional(), NumberRange(min=0, max=100)])
    client_id = IntegerField(validators=[Optional()])
    team_member_ids = IntegerListField()


class TeamForm(Form):
    employee_ids = IntegerListField()


class DailyLogForm(Form):
    notes = TextAreaField(
        validators=[
            DataRequired(),
            Length(min=10, max=2000, message="Log notes must be between 10 and 2000 characters long."),
        ]
    )


class MaterialRequestForm(Form):
    item_id = _required_id("Please select an item.")
    quantity = IntegerField(validators=[InputRequired(), NumberRange(min=1, message="Quantity must be at least 1.")])


class MaterialRequestStatusForm(Form):
    status = SelectField(choices=_choices(["Approved", "Rejected"]), validators=[InputRequired()])


# ---------------------------------------------------------------------
# Employees / HR
# ---------------------------------------------------------------------
class EmployeeForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Name must be at least 2 characters long.")])
    email = StringField(validators=[DataRequired(), Email("Please enter a valid email address.")])
    role = StringField(validators=[DataRequired("Role is required.")])
    department = StringField(validators=[DataRequired("Department is required.")])
    status = SelectField(choices=_choices(EMPLOYEE_STATUSES), default="Active")
    salary = DecimalField(validators=[Optional(), NumberRange(min=0, message="Salary must be a non-negative number.")])
    photo = FileField(validators=[Optional(), max_upload_size])


class RunPayrollForm(Form):
    account_id = _required_id("A bank account is required to run payroll.")
    payroll_date = _valid_date()


class JobForm(Form):
    title = StringField(validators=[DataRequired(), Length(min=3, message="Job title must be at least 3 characters long.")])
    description = TextAreaField(validators=[DataRequired(), Length(min=10, message="Description must be at least 10 characters long.")])
    department = StringField(validators=[DataRequired("Department is required.")])
    status = SelectField(choices=_choices(JOB_STATUSES), default="Open")


class CandidateForm(Form):
    job_id = _required_id("A job is required.")
    name = StringField(validators=[DataRequired(), Length(min=2, message="Name must be at least 2 characters long.")])
    email = StringField(validators=[DataRequired(), Email("Please enter a valid email address.")])
    phone = StringField(validators=[DataRequired(), Length(min=10, message="Phone number must be at least 10 characters long.")])
    resume = FileField(validators=[Optional(), max_upload_size])


class CandidateStatusForm(Form):
    status = SelectField(choices=_choices(CANDIDATE_STATUSES), validators=[InputRequired()])


class TrainingForm(Form):
    employee_id = _required_id("An employee is required.")
    course_name = StringField(validators=[DataRequired(), Length(min=3, message="Course name must be at least 3 characters long.")])
    completion_date = _valid_date()
    certificate = FileField(validators=[Optional(), max_upload_size])


class PerformanceReviewForm(Form):
    employee_id = _required_id("An employee is required.")
    review_date = _valid_date()
    rating = IntegerField(validators=[InputRequired(), NumberRange(min=1, max=5, message="Rating must be between 1 and 5.")])
    goals = TextAreaField(validators=[DataRequired(), Length(min=10, message="Goals must be at least 10 characters long.")])
    feedback = TextAreaField(validators=[DataRequired(), Length(min=10, message="Feedback must be at least 10 characters long.")])


class OffboardingForm(Form):
    employee_id = _required_id("An employee is required.")
    exit_date = _valid_date()
    reason = TextAreaField(validators=[DataRequired(), Length(min=3, message="Reason must be at least 3 characters long.")])
    feedback = TextAreaField(validators=[Optional()])
    assets_returned = BooleanField(default=False)


class LeaveRequestForm(Form):
    employee_id = _required_id("An employee is required.")
    leave_type = SelectField(choices=_choices(LEAVE_TYPES), validators=[InputRequired()])
    start_date = _valid_date("Please select a valid start date.")
    end_date = _valid_date("Please select a valid end date.")
    reason = TextAreaField(validators=[Optional()])


class LeaveStatusForm(Form):
    status = SelectField(choices=_choices(["Approved", "Rejected"]), validators=[InputRequired()])


class CheckInForm(Form):
    employee_id = _required_id("An employee is required.")


# ---------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------
class ClientForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Name must be at least 2 characters long.")])
    company = StringField(validators=[Optional()])
    email = StringField(validators=[DataRequired(), Email("Please enter a valid email address.")])
    phone = StringField(validators=[DataRequired(), Length(min=10, message="Phone number must be at least 10 characters long.")])
    status = SelectField(choices=_choices(CLIENT_STATUSES), default="Lead")


class InteractionForm(Form):
    type = SelectField(choices=_choices(INTERACTION_TYPES), validators=[InputRequired()])
    notes = TextAreaField(validators=[DataRequired(), Length(min=5, message="Notes must be at least 5 characters long.")])
    date = _valid_date()


class ClientContractForm(Form):
    title = StringField(validators=[DataRequired(), Length(min=3, message="Contract title must be at least 3 characters long.")])
    effective_date = _valid_date()
    value = DecimalField(validators=[Optional(), NumberRange(min=0, message="Contract value must be a non-negative number.")])
    document = FileField(validators=[Optional(), max_upload_size])


# ---------------------------------------------------------------------
# Supply chain
# ---------------------------------------------------------------------
class SupplierForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Name must be at least 2 characters long.")])
    contact_person = StringField(
        validators=[DataRequired(), Length(min=2, message="Contact person must be at least 2 characters long.")]
    )
    email = StringField(validators=[DataRequired(), Email("Please enter a valid email address.")])
    phone = StringField(validators=[DataRequired(), Length(min=10, message="Phone number must be at least 10 characters long.")])
    status = SelectField(choices=_choices(SUPPLIER_STATUSES), default="Active")


class EvaluationForm(Form):
    rating = IntegerField(validators=[InputRequired(), NumberRange(min=1, max=5, message="Rating must be between 1 and 5.")])
    evaluation_notes = TextAreaField(validators=[Optional()])


class ContractForm(Form):
    title = StringField(validators=[DataRequired(), Length(min=3, message="Contract title must be at least 3 characters long.")])
    effective_date = _valid_date()
    document = FileField(validators=[Optional(), max_upload_size])


class InventoryForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Name must be at least 2 characters long.")])
    category = StringField(validators=[DataRequired(), Length(min=2, message="Category is required.")])
    quantity = IntegerField(validators=[InputRequired(), NumberRange(min=0, message="Quantity cannot be negative.")])
    warehouse = StringField(validators=[DataRequired(), Length(min=2, message="Warehouse is required.")])
    status = SelectField(choices=_choices(STOCK_STATUSES), default=STOCK_IN)


class AdjustStockForm(Form):
    adjustment = IntegerField(validators=[InputRequired(), non_zero])


class PurchaseRequestForm(Form):
    item_id = _required_id("Item is required.")
    quantity = IntegerField(validators=[InputRequired(), NumberRange(min=1, message="Quantity must be at least 1.")])
    unit_cost = DecimalField(
        validators=[InputRequired(), NumberRange(min=0, message="Unit cost must be a non-negative number.")]
    )
    supplier_id = _required_id("Supplier is required.")
    project_id = _required_id("Project is required.")


class PurchaseStatusForm(Form):
    status = SelectField(choices=_choices(["Approved", "Rejected", "Ordered"]), validators=[InputRequired()])


class WarehouseForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Warehouse name must be at least 2 characters long.")])
    location = StringField(validators=[Optional()])


class CategoryForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Category name must be at least 2 characters long.")])


# ---------------------------------------------------------------------
# Equipment & assets
# ---------------------------------------------------------------------
class AssetForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Asset name must be at least 2 characters long.")])
    category = StringField(validators=[DataRequired("Category is required.")])
    status = SelectField(choices=_choices(ASSET_STATUSES), default="Available")
    purchase_date = _valid_date()
    purchase_cost = DecimalField(
        validators=[InputRequired(), NumberRange(min=0, message="Purchase cost must be a non-negative number.")]
    )
    current_project_id = IntegerField(validators=[Optional()])
    next_maintenance_date = DateField(format="%Y-%m-%d", validators=[Optional()])


class MaintenanceLogForm(Form):
    date = _valid_date()
    type = StringField(validators=[DataRequired("Type is required.")])
    description = TextAreaField(
        validators=[DataRequired(), Length(min=5, message="Description must be at least 5 characters long.")]
    )
    cost = DecimalField(validators=[Optional(), NumberRange(min=0, message="Cost must be a non-negative number.")])
    completed_by = StringField(validators=[Optional()])


# ---------------------------------------------------------------------
# Financials
# ---------------------------------------------------------------------
class InvoiceLineItemForm(Form):
    description = StringField(validators=[DataRequired("Description is required.")])
    quantity = DecimalField(
        validators=[InputRequired(), NumberRange(min=Decimal("0.01"), message="Quantity must be greater than 0.")]
    )
    unit_price = DecimalField(
        validators=[InputRequired(), NumberRange(min=0, message="Unit price must be a non-negative number.")]
    )


class InvoiceForm(Form):
    client_id = _required_id("A client is required.")
    project_id = IntegerField(validators=[Optional()])
    issue_date = _valid_date("Please select a valid issue date.")
    due_date = _valid_date("Please select a valid due date.")
    line_items = FieldList(FormField(InvoiceLineItemForm), min_entries=1)


class InvoiceStatusForm(Form):
    status = SelectField(choices=_choices(["Sent", "Void"]), validators=[InputRequired()])


class MarkPaidForm(Form):
    account_id = _required_id("An account is required.")


class TransactionForm(Form):
    description = StringField(
        validators=[DataRequired(), Length(min=2, message="Description must be at least 2 characters long.")]
    )
    amount = DecimalField(validators=[InputRequired(), positive("Amount must be a positive number.")])
    type = SelectField(choices=_choices(TRANSACTION_TYPES), validators=[InputRequired()])
    date = _valid_date()
    account_id = IntegerField(validators=[Optional()])
    project_id = IntegerField(validators=[Optional()])


class AccountForm(Form):
    name = StringField(validators=[DataRequired(), Length(min=2, message="Account name must be at least 2 characters long.")])
    bank_name = StringField(validators=[DataRequired(), Length(min=2, message="Bank name is required.")])
    account_number = StringField(validators=[Optional()])
    initial_balance = DecimalField(default=0, validators=[Optional()])


# ---------------------------------------------------------------------
# AI
# ---------------------------------------------------------------------
class ComplianceForm(Form):
    erp_description = TextAreaField(
        validators=[
            DataRequired(),
            Length(min=50, message="Please provide a more detailed description (at least 50 characters)."),
        ]
    )
