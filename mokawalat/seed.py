"""
mokawalat/seed.py

Seed the company profile, a default bank account and a small set of sample records.

Rules:
- Safe to run multiple times (idempotent).
- Rows are matched on a natural key (email, name) and never duplicated.
- Existing rows are left untouched.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from .extensions import db
from .models import (
    Account,
    Client,
    CompanyProfile,
    Employee,
    InventoryItem,
    Project,
    Supplier,
    stock_status_for,
)

DEFAULT_COMPANY = {
    "name": "Mokawalat Construction",
    "address": "Cairo, Egypt",
    "phone": "+20 2 0000 0000",
    "email": "info@mokawalat.com",
}

DEFAULT_ACCOUNT = ("Main Operating Account", "National Bank", "0001-0001", Decimal("500000.00"))

SAMPLE_CLIENTS = [
    # name, company, email, phone, status
    ("Ahmed Hassan", "Nile Developments", "ahmed@niledev.com", "01000000001", "Active"),
    ("Sara Mahmoud", "Delta Real Estate", "sara@deltare.com", "01000000002", "Lead"),
]

SAMPLE_EMPLOYEES = [
    # name, email, role, department, salary
    ("Omar Khaled", "omar.khaled@mokawalat.com", "Site Engineer", "Engineering", Decimal("18000.00")),
    ("Mona Adel", "mona.adel@mokawalat.com", "Project Manager", "Projects", Decimal("25000.00")),
    ("Youssef Samir", "youssef.samir@mokawalat.com", "Accountant", "Finance", Decimal("15000.00")),
]

SAMPLE_SUPPLIERS = [
    # name, contact_person, email, phone
    ("Cairo Cement Co.", "Hany Fathy", "sales@cairocement.com", "0223456789"),
    ("Giza Steel", "Rania Lotfy", "orders@gizasteel.com", "0233456789"),
]

SAMPLE_ITEMS = [
    # name, category, quantity, warehouse
    ("Portland Cement (50kg)", "Building Materials", 240, "Main Warehouse"),
    ("Rebar 12mm", "Steel", 8, "Main Warehouse"),
    ("Ceramic Tiles 60x60", "Finishing", 0, "Site Store"),
]

SAMPLE_PROJECT = {
    "name": "New Cairo Residential Tower",
    "description": "Twelve-storey residential building with two basement parking levels.",
    "location": "New Cairo",
    "budget": Decimal("2500000.00"),
    "status": "In Progress",
    "progress": 15,
}


def seed_sample_data() -> int:
    """Create missing seed rows. Returns the number of rows created."""
    created = 0

    if db.session.get(CompanyProfile, 1) is None:
        db.session.add(CompanyProfile(id=1, **DEFAULT_COMPANY))
        created += 1

    name, bank, number, opening = DEFAULT_ACCOUNT
    if not Account.query.filter_by(name=name).first():
        db.session.add(Account(name=name, bank_name=bank, account_number=number, initial_balance=opening))
        created += 1

    for client_name, company, email, phone, status in SAMPLE_CLIENTS:
        if Client.query.filter_by(email=email).first():
            continue
        db.session.add(
            Client(
                name=client_name,
                name_lowercase=client_name.lower(),
                company=company,
                email=email,
                phone=phone,
                status=status,
            )
        )
        created += 1

    for emp_name, email, role, department, salary in SAMPLE_EMPLOYEES:
        if Employee.query.filter_by(email=email).first():
            continue
        db.session.add(
            Employee(
                name=emp_name,
                name_lowercase=emp_name.lower(),
                email=email,
                role=role,
                department=department,
                status="Active",
                salary=salary,
            )
        )
        created += 1

    for sup_name, contact, email, phone in SAMPLE_SUPPLIERS:
        if Supplier.query.filter_by(name=sup_name).first():
            continue
        db.session.add(
            Supplier(
                name=sup_name,
                name_lowercase=sup_name.lower(),
                contact_person=contact,
                email=email,
                phone=phone,
                status="Active",
            )
        )
        created += 1

    for item_name, category, quantity, warehouse in SAMPLE_ITEMS:
        if InventoryItem.query.filter_by(name=item_name).first():
            continue
        db.session.add(
            InventoryItem(
                name=item_name,
                name_lowercase=item_name.lower(),
                category=category,
                quantity=quantity,
                warehouse=warehouse,
                status=stock_status_for(quantity),
            )
        )
        created += 1

    db.session.flush()

    if not Project.query.filter_by(name=SAMPLE_PROJECT["name"]).first():
        client = Client.query.filter_by(email=SAMPLE_CLIENTS[0][2]).first()
        project = Project(
            name_lowercase=SAMPLE_PROJECT["name"].lower(),
            start_date=date.today(),
            client_id=client.id if client else None,
            **SAMPLE_PROJECT,
        )
        project.team_members = Employee.query.filter(
            Employee.email.in_([e[1] for e in SAMPLE_EMPLOYEES[:2]])
        ).all()
        db.session.add(project)
        created += 1

    db.session.commit()
    return created
