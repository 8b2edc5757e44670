"""
Mokawalat ERP – Domain Models

One table per business collection:
- Profiles & company: User, CompanyProfile
- Projects: Project (+ team), DailyLog, MaterialRequest
- CRM: Client, ClientInteraction, ClientContract
- Supply chain: Supplier, SupplierContract, InventoryItem, Warehouse, InventoryCategory, PurchaseRequest
- Equipment: Asset, MaintenanceLog
- Financials: Account, Transaction, Invoice, InvoiceLineItem
- HR: Employee, Job, Candidate, TrainingRecord, PerformanceReview, OffboardingRecord,
  LeaveRequest, AttendanceRecord
- ActivityLogEntry (append-only, used for in-app notifications)

IMPORTANT:
- Input is never trusted. Field rules live in forms.py and are enforced server-side in routes.
- Derived totals (project expense, account balance) are recomputed from rows on read.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from flask_login import UserMixin
from sqlalchemy import func
from werkzeug.security import generate_password_hash, check_password_hash

from .extensions import db


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_USER)

TX_INCOME = "Income"
TX_EXPENSE = "Expense"

STOCK_IN = "In Stock"
STOCK_LOW = "Low Stock"
STOCK_OUT = "Out of Stock"
LOW_STOCK_LIMIT = 10


def _to_decimal(value) -> Decimal:
    """Convert Numeric/None to Decimal safely."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value))


def _money(x: Decimal) -> Decimal:
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def stock_status_for(quantity: int) -> str:
    """Stock status derived from the on-hand quantity."""
    if quantity <= 0:
        return STOCK_OUT
    if quantity <= LOW_STOCK_LIMIT:
        return STOCK_LOW
    return STOCK_IN


# ---------------------------------------------------------------------
# Profiles & company
# ---------------------------------------------------------------------
class User(UserMixin, db.Model):
    """Login user and profile document (role drives route gating)."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(120), nullable=True)

    role = db.Column(db.String(20), nullable=False, default=ROLE_USER, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    photo_url = db.Column(db.String(500), nullable=True)
    locale = db.Column(db.String(5), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def can_manage(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_MANAGER)

    def __repr__(self):
        return f"<User {self.email}>"


class CompanyProfile(db.Model):
    """Single company record (id=1)."""

    __tablename__ = "company_profile"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    email = db.Column(db.String(255))

    logo_url = db.Column(db.String(500))
    logo_path = db.Column(db.String(500))

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ---------------------------------------------------------------------
# HR core
# ---------------------------------------------------------------------
project_team = db.Table(
    "project_team",
    db.Column("project_id", db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    db.Column("employee_id", db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True),
)


class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    name_lowercase = db.Column(db.String(120), index=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    role = db.Column(db.String(120), nullable=False)
    department = db.Column(db.String(120), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="Active", index=True)

    salary = db.Column(db.Numeric(12, 2), nullable=True)

    photo_url = db.Column(db.String(500))
    photo_path = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    projects = db.relationship("Project", secondary=project_team, back_populates="team_members")

    def __repr__(self):
        return f"<Employee {self.name}>"


# ---------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------
class Client(db.Model):
    __tablename__ = "clients"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    name_lowercase = db.Column(db.String(255), index=True)
    company = db.Column(db.String(255))
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="Lead", index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    interactions = db.relationship(
        "ClientInteraction",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="ClientInteraction.date.desc()",
    )
    contracts = db.relationship(
        "ClientContract",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="ClientContract.effective_date.desc()",
    )

    def __repr__(self):
        return f"<Client {self.name}>"


class ClientInteraction(db.Model):
    __tablename__ = "client_interactions"

    id = db.Column(db.Integer, primary_key=True)

    client_id = db.Column(
        db.Integer,
        db.ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = db.Column(db.String(20), nullable=False)
    notes = db.Column(db.Text, nullable=False)
    date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    client = db.relationship("Client", back_populates="interactions")


class ClientContract(db.Model):
    __tablename__ = "client_contracts"

    id = db.Column(db.Integer, primary_key=True)

    client_id = db.Column(
        db.Integer,
        db.ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = db.Column(db.String(255), nullable=False)
    effective_date = db.Column(db.Date, nullable=False)
    value = db.Column(db.Numeric(14, 2), nullable=True)

    document_url = db.Column(db.String(500))
    document_path = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    client = db.relationship("Client", back_populates="contracts")


# ---------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------
class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    name_lowercase = db.Column(db.String(255), index=True)
    description = db.Column(db.Text)
    location = db.Column(db.String(255))

    budget = db.Column(db.Numeric(14, 2), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="Planning", index=True)
    progress = db.Column(db.Integer, nullable=False, default=0)

    client_id = db.Column(
        db.Integer,
        db.ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = db.relationship("Client", backref=db.backref("projects", lazy=True))

    team_members = db.relationship("Employee", secondary=project_team, back_populates="projects")

    daily_logs = db.relationship(
        "DailyLog",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="DailyLog.created_at.desc()",
    )

    def total_expense(self) -> Decimal:
        """Sum of all Expense transactions recorded against this project."""
        total = (
            db.session.query(func.coalesce(func.sum(Transaction.amount), 0))
            .filter(Transaction.project_id == self.id, Transaction.type == TX_EXPENSE)
            .scalar()
        )
        return _money(_to_decimal(total))

    def budget_usage_percent(self) -> Decimal:
        budget = _to_decimal(self.budget)
        if budget <= 0:
            return Decimal("0.00")
        return _money(self.total_expense() / budget * Decimal("100"))

    def __repr__(self):
        return f"<Project {self.name}>"


class DailyLog(db.Model):
    __tablename__ = "daily_logs"

    id = db.Column(db.Integer, primary_key=True)

    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    notes = db.Column(db.Text, nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    author_email = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    project = db.relationship("Project", back_populates="daily_logs")


# ---------------------------------------------------------------------
# Supply chain
# ---------------------------------------------------------------------
class Supplier(db.Model):
    __tablename__ = "suppliers"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    name_lowercase = db.Column(db.String(255), index=True)
    contact_person = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="Active", index=True)

    rating = db.Column(db.Integer, nullable=True)
    evaluation_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    contracts = db.relationship(
        "SupplierContract",
        back_populates="supplier",
        cascade="all, delete-orphan",
        order_by="SupplierContract.effective_date.desc()",
    )

    def __repr__(self):
        return f"<Supplier {self.name}>"


class SupplierContract(db.Model):
    __tablename__ = "supplier_contracts"

    id = db.Column(db.Integer, primary_key=True)

    supplier_id = db.Column(
        db.Integer,
        db.ForeignKey("suppliers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = db.Column(db.String(255), nullable=False)
    effective_date = db.Column(db.Date, nullable=False)

    document_url = db.Column(db.String(500))
    document_path = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    supplier = db.relationship("Supplier", back_populates="contracts")


class InventoryItem(db.Model):
    __tablename__ = "inventory"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    name_lowercase = db.Column(db.String(255), index=True)
    category = db.Column(db.String(120), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    warehouse = db.Column(db.String(120), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STOCK_IN, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def apply_adjustment(self, delta: int) -> None:
        """Change on-hand quantity and recompute status. Caller checks for negatives."""
        self.quantity = (self.quantity or 0) + delta
        self.status = stock_status_for(self.quantity)

    def __repr__(self):
        return f"<InventoryItem {self.name}>"


class Warehouse(db.Model):
    """Named stock location offered when creating inventory items."""

    __tablename__ = "warehouses"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    name_lowercase = db.Column(db.String(120), index=True)
    location = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)


class InventoryCategory(db.Model):
    __tablename__ = "inventory_categories"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    name_lowercase = db.Column(db.String(120), index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)


class MaterialRequest(db.Model):
    __tablename__ = "material_requests"

    id = db.Column(db.Integer, primary_key=True)

    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id = db.Column(
        db.Integer,
        db.ForeignKey("inventory.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    item_name = db.Column(db.String(255))
    quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="Pending", index=True)

    requested_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    project = db.relationship("Project", backref=db.backref("material_requests", lazy=True, cascade="all, delete-orphan"))
    item = db.relationship("InventoryItem")


class PurchaseRequest(db.Model):
    """Purchase request / order for an inventory item, charged to a project."""

    __tablename__ = "purchase_requests"

    id = db.Column(db.Integer, primary_key=True)

    item_id = db.Column(
        db.Integer,
        db.ForeignKey("inventory.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    supplier_id = db.Column(
        db.Integer,
        db.ForeignKey("suppliers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    item_name = db.Column(db.String(255))
    quantity = db.Column(db.Integer, nullable=False)
    unit_cost = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_cost = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    status = db.Column(db.String(20), nullable=False, default="Pending", index=True)

    requested_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    item = db.relationship("InventoryItem")
    supplier = db.relationship("Supplier", backref=db.backref("purchase_requests", lazy=True))
    project = db.relationship("Project", backref=db.backref("purchase_requests", lazy=True))

    def recalc_total(self):
        self.total_cost = _money(Decimal(str(self.quantity or 0)) * _to_decimal(self.unit_cost))


# ---------------------------------------------------------------------
# Equipment & assets
# ---------------------------------------------------------------------
class Asset(db.Model):
    __tablename__ = "assets"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    name_lowercase = db.Column(db.String(255), index=True)
    category = db.Column(db.String(120), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="Available", index=True)

    purchase_date = db.Column(db.Date, nullable=False)
    purchase_cost = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    current_project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    next_maintenance_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    current_project = db.relationship("Project", backref=db.backref("assets", lazy=True))

    maintenance_logs = db.relationship(
        "MaintenanceLog",
        back_populates="asset",
        cascade="all, delete-orphan",
        order_by="MaintenanceLog.date.desc()",
    )

    def __repr__(self):
        return f"<Asset {self.name}>"


class MaintenanceLog(db.Model):
    __tablename__ = "maintenance_logs"

    id = db.Column(db.Integer, primary_key=True)

    asset_id = db.Column(
        db.Integer,
        db.ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    date = db.Column(db.Date, nullable=False)
    type = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False)
    cost = db.Column(db.Numeric(12, 2), nullable=True)
    completed_by = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    asset = db.relationship("Asset", back_populates="maintenance_logs")


# ---------------------------------------------------------------------
# Financials
# ---------------------------------------------------------------------
class Account(db.Model):
    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    bank_name = db.Column(db.String(255), nullable=False)
    account_number = db.Column(db.String(100))
    initial_balance = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    @property
    def balance(self) -> Decimal:
        rows = (
            db.session.query(Transaction.type, func.coalesce(func.sum(Transaction.amount), 0))
            .filter(Transaction.account_id == self.id)
            .group_by(Transaction.type)
            .all()
        )
        totals = {tx_type: _to_decimal(amount) for tx_type, amount in rows}
        return _money(
            _to_decimal(self.initial_balance)
            + totals.get(TX_INCOME, Decimal("0.00"))
            - totals.get(TX_EXPENSE, Decimal("0.00"))
        )


class Transaction(db.Model):
    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)

    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    type = db.Column(db.String(10), nullable=False, index=True)
    date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True, index=True)
    purchase_order_id = db.Column(
        db.Integer,
        db.ForeignKey("purchase_requests.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    invoice_id = db.Column(db.Integer, db.ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    account = db.relationship("Account", backref=db.backref("transactions", lazy=True))
    project = db.relationship("Project", backref=db.backref("transactions", lazy=True))


class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.Integer, primary_key=True)

    invoice_number = db.Column(db.String(30), nullable=False, unique=True, index=True)

    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)

    issue_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False)

    total_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    status = db.Column(db.String(10), nullable=False, default="Draft", index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    client = db.relationship("Client", backref=db.backref("invoices", lazy=True))
    project = db.relationship("Project")

    line_items = db.relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.line_no",
    )

    def recalc_total(self):
        total = Decimal("0.00")
        for line in self.line_items:
            total += line.total
        self.total_amount = _money(total)


class InvoiceLineItem(db.Model):
    __tablename__ = "invoice_line_items"

    id = db.Column(db.Integer, primary_key=True)

    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    line_no = db.Column(db.Integer)
    description = db.Column(db.Text, nullable=False)
    quantity = db.Column(db.Numeric(12, 2), nullable=False, default=1)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    invoice = db.relationship("Invoice", back_populates="line_items")

    @property
    def total(self) -> Decimal:
        if not self.quantity or not self.unit_price:
            return Decimal("0.00")
        return _money(_to_decimal(self.quantity) * _to_decimal(self.unit_price))


class PayrollRun(db.Model):
    """One row per payroll period (YYYY-MM); the unique period blocks duplicate runs."""

    __tablename__ = "payroll_runs"

    id = db.Column(db.Integer, primary_key=True)

    period = db.Column(db.String(7), nullable=False, unique=True, index=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)

    total_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    employee_count = db.Column(db.Integer, nullable=False, default=0)

    run_by_email = db.Column(db.String(255))
    run_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)


# ---------------------------------------------------------------------
# HR sub-modules
# ---------------------------------------------------------------------
class Job(db.Model):
    __tablename__ = "jobs"

    id = db.Column(db.Integer, primary_key=True)

    title = db.Column(db.String(255), nullable=False)
    title_lowercase = db.Column(db.String(255), index=True)
    description = db.Column(db.Text, nullable=False)
    department = db.Column(db.String(120), nullable=False)
    status = db.Column(db.String(10), nullable=False, default="Open", index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    candidates = db.relationship("Candidate", back_populates="job", lazy=True)


class Candidate(db.Model):
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True)

    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="Applied", index=True)

    resume_url = db.Column(db.String(500))
    resume_path = db.Column(db.String(500))

    applied_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    job = db.relationship("Job", back_populates="candidates")


class TrainingRecord(db.Model):
    __tablename__ = "trainings"

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_name = db.Column(db.String(120))

    course_name = db.Column(db.String(255), nullable=False)
    completion_date = db.Column(db.Date, nullable=False)

    certificate_url = db.Column(db.String(500))
    certificate_path = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    employee = db.relationship(
        "Employee", backref=db.backref("trainings", lazy=True, cascade="all, delete-orphan")
    )


class PerformanceReview(db.Model):
    __tablename__ = "performance_reviews"

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_name = db.Column(db.String(120))

    reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewer_email = db.Column(db.String(255))

    review_date = db.Column(db.Date, nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    goals = db.Column(db.Text, nullable=False)
    feedback = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    employee = db.relationship(
        "Employee", backref=db.backref("performance_reviews", lazy=True, cascade="all, delete-orphan")
    )


class OffboardingRecord(db.Model):
    __tablename__ = "offboarding"

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)

    exit_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    feedback = db.Column(db.Text)
    assets_returned = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    employee = db.relationship(
        "Employee", backref=db.backref("offboarding_records", lazy=True, cascade="all, delete-orphan")
    )


class LeaveRequest(db.Model):
    __tablename__ = "leave_requests"

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_name = db.Column(db.String(120))

    leave_type = db.Column(db.String(20), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default="Pending", index=True)

    requested_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    employee = db.relationship(
        "Employee", backref=db.backref("leave_requests", lazy=True, cascade="all, delete-orphan")
    )


class AttendanceRecord(db.Model):
    """One check-in/check-out pair; `date` is the check-in day."""

    __tablename__ = "attendance"

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_name = db.Column(db.String(120))

    date = db.Column(db.Date, nullable=False, index=True)
    check_in_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    check_out_time = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="Present")

    employee = db.relationship(
        "Employee", backref=db.backref("attendance_records", lazy=True, cascade="all, delete-orphan")
    )


# ---------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------
class ActivityLogEntry(db.Model):
    """Append-only, human-readable event records."""

    __tablename__ = "activity_log"

    id = db.Column(db.Integer, primary_key=True)

    message = db.Column(db.String(500), nullable=False)
    type = db.Column(db.String(40), nullable=False, index=True)
    link = db.Column(db.String(255), nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)
