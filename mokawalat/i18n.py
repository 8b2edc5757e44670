"""
mokawalat/i18n.py

Static translation dictionaries (English / Arabic) and dotted-key lookup.

Lookup rules:
- "nav.projects" walks DICTIONARIES[locale]["nav"]["projects"].
- A key missing in the requested locale falls back to English,
  then to the key itself.
"""

from __future__ import annotations

from typing import Any

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = ("en", "ar")
RTL_LOCALES = {"ar"}


DICTIONARIES: dict[str, dict[str, Any]] = {
    "en": {
        "app": {"name": "Mokawalat ERP"},
        "nav": {
            "main": "Main",
            "operations": "Operations",
            "people": "People",
            "finance": "Finance",
            "admin": "Administration",
            "dashboard": "Dashboard",
            "projects": "Projects",
            "material_requests": "Material Requests",
            "inventory": "Inventory",
            "procurement": "Procurement",
            "suppliers": "Suppliers",
            "clients": "Clients",
            "assets": "Equipment & Assets",
            "employees": "Employees",
            "payroll": "Payroll",
            "hr": "Human Resources",
            "jobs": "Jobs",
            "training": "Training",
            "performance": "Performance",
            "offboarding": "Offboarding",
            "leave": "Leave Requests",
            "attendance": "Attendance",
            "financials": "Financials",
            "accounts": "Accounts",
            "invoices": "Invoices",
            "approvals": "Approvals",
            "activity_log": "Activity Log",
            "iso_compliance": "ISO 9001 Compliance",
            "settings": "Settings",
            "company": "Company Profile",
            "users": "Users",
            "warehouses": "Warehouses",
            "categories": "Categories",
        },
        "notifications": {
            "low_stock": "Low stock: {name} ({quantity} left)",
            "pending_po": "Purchase order pending approval: {name}",
            "pending_material_request": "Material request pending: {name}",
            "empty": "You're all caught up.",
        },
        "search": {
            "placeholder": "Search projects, clients, employees...",
            "no_results": "No results found.",
        },
        "common": {
            "save": "Save",
            "cancel": "Cancel",
            "delete": "Delete",
            "edit": "Edit",
            "loading": "Loading...",
        },
    },
    "ar": {
        "app": {"name": "مقاولات ERP"},
        "nav": {
            "main": "الرئيسية",
            "operations": "العمليات",
            "people": "الموارد البشرية",
            "finance": "المالية",
            "admin": "الإدارة",
            "dashboard": "لوحة التحكم",
            "projects": "المشاريع",
            "material_requests": "طلبات المواد",
            "inventory": "المخزون",
            "procurement": "المشتريات",
            "suppliers": "الموردون",
            "clients": "العملاء",
            "assets": "المعدات والأصول",
            "employees": "الموظفون",
            "payroll": "الرواتب",
            "hr": "الموارد البشرية",
            "jobs": "الوظائف",
            "training": "التدريب",
            "performance": "تقييم الأداء",
            "offboarding": "إنهاء الخدمة",
            "leave": "طلبات الإجازة",
            "attendance": "الحضور",
            "financials": "المالية",
            "accounts": "الحسابات",
            "invoices": "الفواتير",
            "approvals": "الموافقات",
            "activity_log": "سجل النشاط",
            "iso_compliance": "الامتثال لمعيار ISO 9001",
            "settings": "الإعدادات",
            "company": "ملف الشركة",
            "users": "المستخدمون",
            "warehouses": "المستودعات",
            "categories": "الفئات",
        },
        "notifications": {
            "low_stock": "مخزون منخفض: {name} (المتبقي {quantity})",
            "pending_po": "أمر شراء بانتظار الموافقة: {name}",
            "pending_material_request": "طلب مواد قيد الانتظار: {name}",
        },
        "search": {
            "placeholder": "ابحث في المشاريع والعملاء والموظفين...",
        },
        "common": {
            "save": "حفظ",
            "cancel": "إلغاء",
            "delete": "حذف",
            "edit": "تعديل",
        },
    },
}


def _lookup(locale: str, keys: list[str]) -> str | None:
    node: Any = DICTIONARIES.get(locale)
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node if isinstance(node, str) and node else None


def normalize_locale(locale: str | None) -> str:
    return locale if locale in SUPPORTED_LOCALES else DEFAULT_LOCALE


def translate(key: str, locale: str | None = None, **params: Any) -> str:
    """Resolve a dotted key for locale, falling back to English and then to the key."""
    keys = key.split(".")
    text = _lookup(normalize_locale(locale), keys) or _lookup(DEFAULT_LOCALE, keys) or key
    if params:
        text = text.format(**params)
    return text


def text_direction(locale: str | None) -> str:
    return "rtl" if normalize_locale(locale) in RTL_LOCALES else "ltr"
