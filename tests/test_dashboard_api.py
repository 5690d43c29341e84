from datetime import date, timedelta
from decimal import Decimal

from .conftest import auth_headers
from .test_imprest_api import issue


def test_dashboard_stats(client, staff_headers, cashier, funded_branch):
    today = date.today().isoformat()
    client.post("/api/reconciliations/", headers=staff_headers, json={
        "date": today, "cashier_id": cashier.id, "total_sales": "100", "cash_at_hand": "100",
    })
    issue(client, staff_headers, amount="400")
    old = (date.today() - timedelta(days=60)).isoformat() + "T09:00:00Z"
    issue(client, staff_headers, amount="600", date_issued=old)
    client.post("/api/fuel-coupons/", headers=staff_headers, json={
        "staff_name": "Emeka", "department": "Ops", "fuel_type": "PETROL",
        "quantity_litres": "10", "estimated_amount": "9000",
    })

    stats = client.get("/api/dashboard/stats", headers=staff_headers).json()
    assert stats["reconciliations"] == {"today": 1, "variances": 0}
    assert stats["fuel_coupons"]["this_week"] == 1
    assert Decimal(str(stats["fuel_coupons"]["total_amount"])) == Decimal("9000")
    assert stats["imprest"]["outstanding"] == 2
    assert Decimal(str(stats["imprest"]["outstanding_amount"])) == Decimal("1000")
    assert stats["imprest"]["overdue"] == 1
    assert 0 < len(stats["recent_activity"]) <= 5


def test_analytics(client, staff_headers, manager_headers, funded_branch, other_staff):
    first = issue(client, staff_headers, amount="300", category="MEALS").json()["imprest_no"]
    issue(client, staff_headers, amount="700", category="TRANSPORT")
    client.post(f"/api/imprest/{first}/retire", headers=staff_headers, json={"amount_spent": "300"})

    data = client.get("/api/analytics/", headers=manager_headers).json()
    summary = data["summary"]
    assert Decimal(str(summary["total_imprest_issued"])) == Decimal("1000")
    assert summary["branches"] == 2
    assert summary["retirement_rate"] == 50.0
    assert summary["active_staff"] == 3

    charts = data["charts"]
    statuses = {p["name"]: p["value"] for p in charts["imprest_status"]}
    assert statuses == {"ISSUED": 1, "RETIRED": 1}
    performance = {p["name"]: p["value"] for p in charts["branch_performance"]}
    assert performance == {"Abuja Branch": 0, "Lagos Branch": 1}
    assert len(charts["monthly_trends"]) == 6
    assert Decimal(str(charts["monthly_trends"][-1]["value"])) == Decimal("1000")

    # Staff from another branch only see their own figures
    remote = client.get("/api/analytics/", headers=auth_headers(other_staff)).json()
    assert Decimal(str(remote["summary"]["total_imprest_issued"])) == Decimal("0")
    assert remote["summary"]["active_staff"] == 1


def test_audit_logs_are_manager_only(client, staff_headers, manager_headers, funded_branch):
    issue(client, staff_headers)

    assert client.get("/api/audit-logs/", headers=staff_headers).status_code == 403

    logs = client.get("/api/audit-logs/", headers=manager_headers, params={"module": "imprest"}).json()
    assert [entry["action"] for entry in logs] == ["CREATE_IMPREST"]
    assert logs[0]["user_name"] == "Staff"
    assert logs[0]["details"]["staff_name"] == "Musa Bello"
