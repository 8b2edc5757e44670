"""Pytest configuration and fixtures for Mokawalat ERP.

Every test gets a fresh app on an in-memory SQLite database with CSRF off,
no AI key and no webhook URLs. Uploads go to a per-test temp directory.

Clients are logged in through the real /auth/login route; use one client
per signed-in user (Flask-Login keeps the user on the client's session).
"""

from datetime import date
from decimal import Decimal

import pytest

from config import TestConfig
from mokawalat import create_app
from mokawalat.extensions import db
from mokawalat.models import (
    Account,
    Client,
    Employee,
    InventoryItem,
    Project,
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_USER,
    Supplier,
    User,
    stock_status_for,
)

PASSWORD = "secret123"


@pytest.fixture
def app(tmp_path):
    """Flask app bound to a fresh in-memory database."""

    class _Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Anonymous test client."""
    return app.test_client()


def _make_user(app, email: str, role: str) -> int:
    with app.app_context():
        user = User(email=email, display_name=email.split("@")[0], role=role, is_active=True)
        user.set_password(PASSWORD)
        db.session.add(user)
        db.session.commit()
        return user.id


def _logged_in_client(app, email: str, role: str):
    _make_user(app, email, role)
    c = app.test_client()
    response = c.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.get_json()
    return c


@pytest.fixture
def admin_client(app):
    return _logged_in_client(app, "boss@mokawalat.com", ROLE_ADMIN)


@pytest.fixture
def manager_client(app):
    return _logged_in_client(app, "manager@mokawalat.com", ROLE_MANAGER)


@pytest.fixture
def user_client(app):
    return _logged_in_client(app, "worker@mokawalat.com", ROLE_USER)


# ---------------------------------------------------------------------
# Record factories (each returns the new row id)
# ---------------------------------------------------------------------
@pytest.fixture
def make_project(app):
    def _make(name="Tower A", budget="1000.00", client_id=None):
        with app.app_context():
            project = Project(
                name=name,
                name_lowercase=name.lower(),
                budget=Decimal(budget),
                start_date=date(2024, 1, 1),
                status="In Progress",
                client_id=client_id,
            )
            db.session.add(project)
            db.session.commit()
            return project.id

    return _make


@pytest.fixture
def make_item(app):
    def _make(name="Cement", quantity=50):
        with app.app_context():
            item = InventoryItem(
                name=name,
                name_lowercase=name.lower(),
                category="Building Materials",
                quantity=quantity,
                warehouse="Main",
                status=stock_status_for(quantity),
            )
            db.session.add(item)
            db.session.commit()
            return item.id

    return _make


@pytest.fixture
def make_supplier(app):
    def _make(name="Giza Steel"):
        with app.app_context():
            supplier = Supplier(
                name=name,
                name_lowercase=name.lower(),
                contact_person="Rania Lotfy",
                email="orders@gizasteel.com",
                phone="0233456789",
            )
            db.session.add(supplier)
            db.session.commit()
            return supplier.id

    return _make


@pytest.fixture
def make_client_record(app):
    def _make(name="Nile Developments", email="info@niledev.com"):
        with app.app_context():
            client = Client(
                name=name,
                name_lowercase=name.lower(),
                email=email,
                phone="01000000001",
                status="Active",
            )
            db.session.add(client)
            db.session.commit()
            return client.id

    return _make


@pytest.fixture
def make_employee(app):
    def _make(name="Omar Khaled", email="omar@mokawalat.com", salary="10000.00", status="Active"):
        with app.app_context():
            employee = Employee(
                name=name,
                name_lowercase=name.lower(),
                email=email,
                role="Site Engineer",
                department="Engineering",
                status=status,
                salary=Decimal(salary) if salary is not None else None,
            )
            db.session.add(employee)
            db.session.commit()
            return employee.id

    return _make


@pytest.fixture
def make_account(app):
    def _make(name="Main Account", initial_balance="0.00"):
        with app.app_context():
            account = Account(name=name, bank_name="National Bank", initial_balance=Decimal(initial_balance))
            db.session.add(account)
            db.session.commit()
            return account.id

    return _make
