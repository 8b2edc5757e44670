"""
mokawalat/alerts.py

Budget threshold alerts.

Flow (per Expense transaction tied to a project):
1) Caller captures project.total_expense() BEFORE adding the new transaction.
2) check_budget_thresholds() compares previous% and new% against each configured
   threshold (ascending) and, for every threshold t with previous% < t <= new%,
   adds a BUDGET_ALERT activity entry to the session and returns a webhook payload.
3) After commit, the caller hands the payloads to send_budget_alert_webhooks().

IMPORTANT:
- Projects without a positive budget never alert.
- Webhook delivery is best effort: failures are logged as warnings and never
  roll back the expense that triggered them.
- Two concurrent writers on the same project can both see the same "previous"
  total; there is no locking around the check.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

import requests
from flask import current_app

from .activity import log_activity
from .models import Project, _money, _to_decimal

logger = logging.getLogger(__name__)

BUDGET_ALERT = "BUDGET_ALERT"


def crossed_thresholds(previous_percent: Decimal, new_percent: Decimal, thresholds) -> list[int]:
    """Thresholds t (ascending) with previous_percent < t <= new_percent."""
    return [t for t in sorted(thresholds) if previous_percent < t <= new_percent]


def check_budget_thresholds(project: Project, previous_total, amount) -> List[Dict[str, Any]]:
    """
    Log one BUDGET_ALERT per threshold crossed by adding `amount` to `previous_total`.

    Returns the webhook payloads (one per crossed threshold).
    """
    budget = _to_decimal(project.budget)
    if budget <= 0:
        return []

    previous_total = _to_decimal(previous_total)
    new_total = previous_total + _to_decimal(amount)

    previous_percent = previous_total / budget * Decimal("100")
    new_percent = new_total / budget * Decimal("100")

    thresholds = current_app.config.get("BUDGET_ALERT_THRESHOLDS") or []
    payloads: List[Dict[str, Any]] = []

    for threshold in crossed_thresholds(previous_percent, new_percent, thresholds):
        link = f"/projects/{project.id}"
        percent = _money(new_percent)

        log_activity(
            f'Budget alert: project "{project.name}" reached {threshold}% of its budget '
            f"({percent}% used).",
            BUDGET_ALERT,
            link,
        )
        logger.info("Budget threshold %s%% crossed for project %s", threshold, project.id)

        payloads.append(
            {
                "type": BUDGET_ALERT,
                "projectId": project.id,
                "projectName": project.name,
                "threshold": threshold,
                "budget": float(budget),
                "totalExpense": float(_money(new_total)),
                "percent": float(percent),
                "link": link,
                "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            }
        )

    return payloads


def send_budget_alert_webhooks(payloads: List[Dict[str, Any]]) -> int:
    """
    POST each payload to every configured webhook URL.

    Returns the number of successful deliveries.
    """
    urls = current_app.config.get("WEBHOOK_BUDGET_ALERT_URLS") or []
    if not urls or not payloads:
        return 0

    timeout = current_app.config.get("WEBHOOK_TIMEOUT_SECONDS", 5)
    delivered = 0

    for payload in payloads:
        for url in urls:
            try:
                response = requests.post(url, json=payload, timeout=timeout)
                response.raise_for_status()
                delivered += 1
            except requests.RequestException as exc:
                logger.warning("Budget webhook to %s failed: %s", url, exc)

    return delivered
