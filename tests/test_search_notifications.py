"""Global search, notification feed, activity log and i18n lookup."""

from mokawalat.i18n import text_direction, translate


def test_search_needs_two_characters(user_client, make_project):
    make_project(name="Tower A")
    assert user_client.get("/search?q=T").get_json()["results"] == []
    assert user_client.get("/search?q=%20%20").get_json()["results"] == []


def test_search_is_a_case_sensitive_prefix_match(user_client, make_project, make_item, make_supplier):
    make_project(name="Tower A")
    make_item(name="Tower Crane Parts", quantity=4)
    make_supplier(name="Towers Supply")
    make_project(name="Bridge")

    results = user_client.get("/search?q=Tow").get_json()["results"]
    assert [(r["type"], r["name"]) for r in results] == [
        ("Project", "Tower A"),
        ("Supplier", "Towers Supply"),
        ("Inventory Item", "Tower Crane Parts"),
    ]
    assert results[0]["context"] == "In Progress"
    assert results[2] == {"name": "Tower Crane Parts", "type": "Inventory Item", "url": "/inventory", "context": "Qty: 4"}

    assert user_client.get("/search?q=tow").get_json()["results"] == []


def test_search_caps_results_in_collection_order(
    user_client, make_project, make_client_record, make_employee, make_supplier, make_item
):
    for n in range(4):
        make_project(name=f"Block {n}")
    for n in range(3):
        make_client_record(name=f"Block Client {n}", email=f"client{n}@example.com")
    for n in range(2):
        make_employee(name=f"Block Employee {n}", email=f"employee{n}@mokawalat.com")
    for n in range(2):
        make_supplier(name=f"Block Supplier {n}")
    for n in range(3):
        make_item(name=f"Block item {n}")

    results = user_client.get("/search?q=Block").get_json()["results"]
    assert len(results) == 10
    assert [r["type"] for r in results] == ["Project"] * 4 + ["Client"] * 3 + ["Employee"] * 2 + ["Supplier"]
    assert [r["name"] for r in results[:4]] == ["Block 0", "Block 1", "Block 2", "Block 3"]
    assert results[-1]["name"] == "Block Supplier 0"


def test_search_dedupes_inventory_urls(user_client, make_project, make_item):
    for n in range(2):
        make_project(name=f"Block {n}")
    for n in range(5):
        make_item(name=f"Block item {n}")

    results = user_client.get("/search?q=Block").get_json()["results"]
    assert [r["type"] for r in results] == ["Project", "Project", "Inventory Item"]
    assert results[-1] == {"name": "Block item 0", "type": "Inventory Item", "url": "/inventory", "context": "Qty: 50"}


def test_notifications_collect_low_stock_and_pending_work(user_client, make_item, make_project, make_supplier):
    make_item(name="Rebar", quantity=4)
    make_item(name="Tiles", quantity=0)
    project_id = make_project()
    supplier_id = make_supplier()
    item_id = make_item(name="Cement", quantity=100)

    user_client.post(
        "/procurement",
        json={"item_id": item_id, "supplier_id": supplier_id, "project_id": project_id, "quantity": 2, "unit_cost": "5"},
    )
    user_client.post(f"/projects/{project_id}/material-requests", json={"item_id": item_id, "quantity": 1})

    notifications = user_client.get("/notifications").get_json()["notifications"]
    kinds = sorted(n["type"] for n in notifications)
    assert kinds == ["Low Stock", "Pending Material Request", "Pending PO"]

    low = next(n for n in notifications if n["type"] == "Low Stock")
    assert low["message"] == "Low stock: Rebar (4 left)"
    assert low["link"] == "/inventory"

    assert len(user_client.get("/notifications?limit=1").get_json()["notifications"]) == 1


def test_activity_log_filters_by_type(user_client):
    user_client.post(
        "/clients", json={"name": "Delta RE", "email": "delta@example.com", "phone": "01000000009"}
    )
    user_client.post(
        "/inventory", json={"name": "Sand", "category": "Aggregates", "quantity": 40, "warehouse": "Yard"}
    )

    entries = user_client.get("/activity?type=CLIENT_ADDED").get_json()["activity"]
    assert [e["message"] for e in entries] == ["New client added: Delta RE"]
    assert entries[0]["link"].startswith("/clients/")


def test_activity_limit_is_clamped_to_at_least_one(user_client):
    for name in ("Delta RE", "Sigma RE"):
        user_client.post("/clients", json={"name": name, "email": "sales@example.com", "phone": "01000000009"})

    for limit in ("-1", "0"):
        entries = user_client.get(f"/activity?limit={limit}").get_json()["activity"]
        assert [e["message"] for e in entries] == ["New client added: Sigma RE"]


def test_translate_falls_back_to_english_then_key():
    assert translate("nav.dashboard", "ar") == "لوحة التحكم"
    assert translate("nav.dashboard", "de") == "Dashboard"
    assert translate("nav.does_not_exist", "ar") == "nav.does_not_exist"
    assert translate("notifications.low_stock", "en", name="Sand", quantity=3) == "Low stock: Sand (3 left)"
    assert text_direction("ar") == "rtl"
    assert text_direction(None) == "ltr"
