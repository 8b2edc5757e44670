"""
mokawalat/search.py

Global search across the main collections.

Behavior:
- Terms shorter than 2 characters (after strip) return [].
- Each collection runs a case-sensitive prefix range query on `name`
  (name >= term AND name <= term + U+F8FF), at most 5 rows per collection.
- Results are deduplicated by URL (first wins) and capped at 10 overall.
"""

from __future__ import annotations

from typing import Callable, TypedDict

from .models import Client, Employee, InventoryItem, Project, Supplier

MIN_TERM_LENGTH = 2
PER_COLLECTION_LIMIT = 5
MAX_RESULTS = 10
PREFIX_SENTINEL = "\uf8ff"


class SearchResult(TypedDict):
    name: str
    type: str
    url: str
    context: str | None


# (model, result type, url builder, context builder), in result order
SEARCH_SOURCES: list[tuple[type, str, Callable, Callable]] = [
    (Project, "Project", lambda row: f"/projects/{row.id}", lambda row: row.status),
    (Client, "Client", lambda row: f"/clients/{row.id}", lambda row: row.email),
    (Employee, "Employee", lambda row: f"/employees/{row.id}", lambda row: row.role),
    (Supplier, "Supplier", lambda row: f"/suppliers/{row.id}", lambda row: row.contact_person),
    (InventoryItem, "Inventory Item", lambda row: "/inventory", lambda row: f"Qty: {row.quantity}"),
]


def _prefix_query(model, term: str):
    return (
        model.query
        .filter(model.name >= term, model.name <= term + PREFIX_SENTINEL)
        .order_by(model.name.asc())
        .limit(PER_COLLECTION_LIMIT)
    )


def global_search(search_term: str | None) -> list[SearchResult]:
    if not search_term or len(search_term.strip()) < MIN_TERM_LENGTH:
        return []

    term = search_term.strip()
    results: list[SearchResult] = []
    added_urls: set[str] = set()

    for model, result_type, build_url, build_context in SEARCH_SOURCES:
        for row in _prefix_query(model, term).all():
            url = build_url(row)
            if url in added_urls:
                continue
            added_urls.add(url)
            results.append(
                SearchResult(name=row.name, type=result_type, url=url, context=build_context(row))
            )

    return results[:MAX_RESULTS]
