"""Monthly payroll run (admin only)."""

from mokawalat.models import ActivityLogEntry, PayrollRun, Transaction


def test_payroll_overview_is_admin_only(user_client, admin_client, make_employee):
    make_employee(salary="12000.00")
    make_employee(name="Idle Person", email="idle@mokawalat.com", salary="9000.00", status="Inactive")

    redirected = user_client.get("/employees/payroll")
    assert redirected.status_code == 302
    assert redirected.headers["Location"].endswith("/dashboard")

    body = admin_client.get("/employees/payroll").get_json()
    assert [e["name"] for e in body["employees"]] == ["Omar Khaled"]
    assert body["total_payroll"] == 12000.0


def test_run_payroll_posts_one_expense_per_employee(app, admin_client, make_employee, make_account):
    account_id = make_account(initial_balance="50000.00")
    make_employee(salary="12000.00")
    make_employee(name="Mona Adel", email="mona@mokawalat.com", salary="8000.00")
    make_employee(name="Unpaid Intern", email="intern@mokawalat.com", salary=None)

    response = admin_client.post("/employees/payroll/run", json={"account_id": account_id, "payroll_date": "2024-05-28"})
    assert response.status_code == 201
    assert response.get_json()["message"] == "Payroll run successfully for 2 employees."

    with app.app_context():
        descriptions = sorted(t.description for t in Transaction.query.all())
        assert descriptions == [
            "Monthly Salary for Mona Adel (2024-05)",
            "Monthly Salary for Omar Khaled (2024-05)",
        ]
        run = PayrollRun.query.one()
        assert run.period == "2024-05"
        assert float(run.total_amount) == 20000.0
        assert ActivityLogEntry.query.filter_by(type="PAYROLL_RUN").one().link == "/financials"

    duplicate = admin_client.post(
        "/employees/payroll/run", json={"account_id": account_id, "payroll_date": "2024-05-30"}
    )
    assert duplicate.status_code == 409
    assert duplicate.get_json()["message"] == "Payroll has already been run for May 2024."
    assert duplicate.get_json()["errors"] == {"_server": ["Duplicate payroll run prevented."]}


def test_run_payroll_without_employees(admin_client, make_account):
    account_id = make_account()
    response = admin_client.post("/employees/payroll/run", json={"account_id": account_id, "payroll_date": "2024-06-28"})
    assert response.status_code == 400
    assert response.get_json()["message"] == "No active employees with salaries found to run payroll for."


def test_run_payroll_is_forbidden_for_non_admins(user_client, make_account):
    account_id = make_account()
    response = user_client.post("/employees/payroll/run", json={"account_id": account_id, "payroll_date": "2024-06-28"})
    assert response.status_code == 403
