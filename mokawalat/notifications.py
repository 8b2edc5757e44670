"""
mokawalat/notifications.py

Notification feed, recomputed on every request:
- inventory items with status Low Stock
- purchase requests still Pending
- material requests still Pending
- the latest 10 BUDGET_ALERT activity entries

Sorted newest first.
"""

from __future__ import annotations

from datetime import datetime

from .alerts import BUDGET_ALERT
from .i18n import translate
from .models import ActivityLogEntry, InventoryItem, MaterialRequest, PurchaseRequest, STOCK_LOW

BUDGET_ALERT_LIMIT = 10


def _notification(kind: str, record_id: int, message: str, link: str, timestamp: datetime | None) -> dict:
    return {
        "id": f"{kind}-{record_id}",
        "type": kind,
        "message": message,
        "link": link,
        "timestamp": timestamp or datetime.utcnow(),
    }


def collect_notifications(locale: str | None = None, limit: int | None = None) -> list[dict]:
    notifications: list[dict] = []

    for item in InventoryItem.query.filter_by(status=STOCK_LOW).all():
        notifications.append(
            _notification(
                "Low Stock",
                item.id,
                translate("notifications.low_stock", locale, name=item.name, quantity=item.quantity),
                "/inventory",
                item.created_at,
            )
        )

    for po in PurchaseRequest.query.filter_by(status="Pending").all():
        notifications.append(
            _notification(
                "Pending PO",
                po.id,
                translate("notifications.pending_po", locale, name=f"{po.quantity}x {po.item_name}"),
                "/procurement",
                po.requested_at,
            )
        )

    for request_row in MaterialRequest.query.filter_by(status="Pending").all():
        notifications.append(
            _notification(
                "Pending Material Request",
                request_row.id,
                translate("notifications.pending_material_request", locale, name=request_row.item_name),
                "/material-requests",
                request_row.requested_at,
            )
        )

    budget_alerts = (
        ActivityLogEntry.query.filter_by(type=BUDGET_ALERT)
        .order_by(ActivityLogEntry.timestamp.desc())
        .limit(BUDGET_ALERT_LIMIT)
        .all()
    )
    for entry in budget_alerts:
        notifications.append(
            _notification("Budget Alert", entry.id, entry.message or "Budget alert", entry.link or "/projects", entry.timestamp)
        )

    notifications.sort(key=lambda n: n["timestamp"], reverse=True)
    if limit is not None:
        notifications = notifications[:limit]

    for n in notifications:
        n["timestamp"] = n["timestamp"].isoformat()
    return notifications
