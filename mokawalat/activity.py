"""
mokawalat/activity.py

Activity log helper utilities.

Goals:
- Record a human-readable line for every business event (project created, PO ordered, ...).
- Feed the notifications popover (BUDGET_ALERT entries) and the /activity page.

IMPORTANT:
- This helper ADDS ActivityLogEntry rows to the current SQLAlchemy session.
  The calling route controls transaction boundaries (commit/rollback), so
  the entity and its log entry land together.
- serialize_model() is the JSON shape every blueprint returns for a row.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from flask_login import current_user

from .extensions import db
from .models import ActivityLogEntry


def _json_value(value: Any) -> Any:
    """
    Convert a column value to something jsonify() can emit.

    - Decimal -> float
    - date/datetime -> ISO 8601 string
    - everything else unchanged
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def serialize_model(instance: Any, *, exclude: tuple[str, ...] = ()) -> Dict[str, Any]:
    """
    Convert a SQLAlchemy model instance to a dict based on table columns.

    NOTES:
    - Captures only scalar column values (not relationships).
    - Storage paths (*_path) and password hashes never leave the server.
    """
    data: Dict[str, Any] = {}
    for column in instance.__table__.columns:
        name = column.name
        if name in exclude or name.endswith("_path") or name == "password_hash":
            continue
        data[name] = _json_value(getattr(instance, name))
    return data


def log_activity(message: str, type: str, link: Optional[str] = None) -> ActivityLogEntry:
    """
    Add an ActivityLogEntry to the current db session.

    Parameters:
        message: human-readable line shown in the activity feed
        type: event key, e.g. PROJECT_CREATED, BUDGET_ALERT
        link: in-app URL of the affected record (optional)
    """
    if not message or not type:
        raise ValueError("log_activity requires 'message' and 'type'.")

    entry = ActivityLogEntry(
        message=message,
        type=type,
        link=link,
        user_id=current_user.id if current_user and current_user.is_authenticated else None,
        timestamp=datetime.utcnow(),
    )
    db.session.add(entry)
    return entry
