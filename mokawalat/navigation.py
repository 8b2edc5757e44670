"""
mokawalat/navigation.py

Sidebar structure (UI visibility only; security enforced in routes).

Labels are i18n keys resolved for the user's locale.
"""

from __future__ import annotations

from .i18n import translate

NAV_SECTIONS = [
    {
        "key": "main",
        "label": "nav.main",
        "items": [
            {"label": "nav.dashboard", "url": "/dashboard", "admin_only": False},
            {"label": "nav.approvals", "url": "/approvals", "admin_only": True},
            {"label": "nav.activity_log", "url": "/activity", "admin_only": False},
        ],
    },
    {
        "key": "operations",
        "label": "nav.operations",
        "items": [
            {"label": "nav.projects", "url": "/projects", "admin_only": False},
            {"label": "nav.material_requests", "url": "/material-requests", "admin_only": False},
            {"label": "nav.inventory", "url": "/inventory", "admin_only": False},
            {"label": "nav.procurement", "url": "/procurement", "admin_only": False},
            {"label": "nav.suppliers", "url": "/suppliers", "admin_only": False},
            {"label": "nav.clients", "url": "/clients", "admin_only": False},
            {"label": "nav.assets", "url": "/assets", "admin_only": False},
        ],
    },
    {
        "key": "people",
        "label": "nav.people",
        "items": [
            {"label": "nav.employees", "url": "/employees", "admin_only": False},
            {"label": "nav.payroll", "url": "/employees/payroll", "admin_only": True},
            {"label": "nav.jobs", "url": "/hr/jobs", "admin_only": False},
            {"label": "nav.training", "url": "/hr/training", "admin_only": False},
            {"label": "nav.performance", "url": "/hr/performance", "admin_only": False},
            {"label": "nav.offboarding", "url": "/hr/offboarding", "admin_only": False},
            {"label": "nav.leave", "url": "/hr/leave", "admin_only": False},
            {"label": "nav.attendance", "url": "/hr/attendance", "admin_only": False},
        ],
    },
    {
        "key": "finance",
        "label": "nav.finance",
        "items": [
            {"label": "nav.financials", "url": "/financials/transactions", "admin_only": False},
            {"label": "nav.accounts", "url": "/financials/accounts", "admin_only": False},
            {"label": "nav.invoices", "url": "/invoices", "admin_only": False},
        ],
    },
    {
        "key": "admin",
        "label": "nav.admin",
        "items": [
            {"label": "nav.iso_compliance", "url": "/iso-compliance", "admin_only": False},
            {"label": "nav.company", "url": "/settings/company", "admin_only": False},
            {"label": "nav.warehouses", "url": "/settings/warehouses", "admin_only": False},
            {"label": "nav.categories", "url": "/settings/categories", "admin_only": False},
            {"label": "nav.users", "url": "/settings/users", "admin_only": True},
        ],
    },
]


def visible_sections(user, locale: str | None = None) -> list[dict]:
    """
    Navigation filtered by user and translated.

    SECURITY NOTE:
    - This only filters visibility. Routes enforce permissions.
    """
    is_admin = bool(user is not None and user.is_authenticated and user.is_admin)
    sections = []

    for section in NAV_SECTIONS:
        items = [
            {"label": translate(item["label"], locale), "url": item["url"]}
            for item in section["items"]
            if is_admin or not item["admin_only"]
        ]
        if items:
            sections.append(
                {"key": section["key"], "label": translate(section["label"], locale), "items": items}
            )

    return sections
