from decimal import Decimal

from findules.models import Cashier

from .conftest import auth_headers

DAILY = {
    "date": "2024-06-10",
    "actual_opening_balance": "10000",
    "total_sales": "50000",
    "pos_transactions_amount": "20000",
    "discounts_given": "1000",
    "refunds_issued": "500",
    "cash_withdrawn": "5000",
    "cash_at_hand": "33400",
}


def create(client, headers, cashier_id, **overrides):
    return client.post("/api/reconciliations/", headers=headers, json={**DAILY, "cashier_id": cashier_id, **overrides})


def test_create_computes_and_stores_figures(client, staff_headers, cashier):
    resp = create(client, staff_headers, cashier.id, remarks="Short by 100")

    assert resp.status_code == 201
    body = resp.json()
    assert body["serial_number"].startswith("REC-")
    assert body["serial_number"].endswith("-0001")
    assert body["cashier_name"] == "Ada Obi"
    assert body["branch_name"] == "Lagos Branch"
    assert Decimal(body["turn_over"]) == Decimal("60000")
    assert Decimal(body["expected_closing_balance"]) == Decimal("33500")
    assert Decimal(body["overage_shortage"]) == Decimal("-100")
    assert Decimal(body["actual_closing_balance"]) == Decimal("33400")
    assert body["variance_category"] == "MAJOR_SHORTAGE"
    assert body["status"] == "ACTIVE"


def test_cash_transaction_is_recorded_but_not_deducted(client, staff_headers, cashier):
    body = create(client, staff_headers, cashier.id, cash_transaction="7500").json()
    assert Decimal(body["cash_transaction"]) == Decimal("7500")
    assert Decimal(body["expected_closing_balance"]) == Decimal("33500")


def test_unknown_cashier_is_a_validation_error(client, staff_headers):
    resp = create(client, staff_headers, 999)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid cashier selected"


def test_one_reconciliation_per_cashier_per_day(client, staff_headers, cashier):
    assert create(client, staff_headers, cashier.id).status_code == 201
    again = create(client, staff_headers, cashier.id)
    assert again.status_code == 409
    assert again.json()["code"] == "CONFLICT"

    assert create(client, staff_headers, cashier.id, date="2024-06-11").status_code == 201


def test_retire_once(client, staff_headers, cashier):
    serial = create(client, staff_headers, cashier.id).json()["serial_number"]

    first = client.patch(f"/api/reconciliations/{serial}/retire", headers=staff_headers)
    assert first.status_code == 200
    assert first.json()["status"] == "RETIRED"
    assert Decimal(first.json()["overage_shortage"]) == Decimal("-100")

    again = client.patch(f"/api/reconciliations/{serial}/retire", headers=staff_headers)
    assert again.status_code == 409

    assert client.patch("/api/reconciliations/REC-0000-00-0000/retire", headers=staff_headers).status_code == 404


def test_previous_balance_carries_forward(client, staff_headers, cashier):
    params = {"cashier_id": cashier.id, "date": "2024-06-10"}
    empty = client.get("/api/reconciliations/previous-balance", headers=staff_headers, params=params).json()
    assert empty["has_history"] is False

    create(client, staff_headers, cashier.id, date="2024-06-08", cash_at_hand="1200")
    create(client, staff_headers, cashier.id, date="2024-06-09", cash_at_hand="1500")

    prev = client.get("/api/reconciliations/previous-balance", headers=staff_headers, params=params).json()
    assert prev["has_history"] is True
    assert Decimal(prev["previous_closing_balance"]) == Decimal("1500")
    assert prev["previous_date"] == "2024-06-09"


def test_listing_is_scoped_to_the_users_branch(client, db, staff_headers, manager_headers, cashier,
                                                other_branch, other_staff):
    remote = Cashier(name="Bola", branch_id=other_branch.id)
    db.add(remote)
    db.commit()
    remote_id = remote.id

    create(client, staff_headers, cashier.id)
    create(client, auth_headers(other_staff), remote_id)

    # Staff cannot record for another branch's cashier
    assert create(client, staff_headers, remote_id, date="2024-06-12").status_code == 403

    own = client.get("/api/reconciliations/", headers=staff_headers).json()
    assert [r["cashier_name"] for r in own] == ["Ada Obi"]

    everything = client.get("/api/reconciliations/", headers=manager_headers).json()
    assert len(everything) == 2
    filtered = client.get("/api/reconciliations/", headers=manager_headers,
                          params={"branch_id": other_branch.id, "date": "2024-06-10"}).json()
    assert [r["cashier_name"] for r in filtered] == ["Bola"]


def test_sub_cent_figures_are_rejected_instead_of_rounded(client, staff_headers, cashier):
    # Rounded to 50.00 this would be a minor overage, unrounded a major one
    resp = client.post("/api/reconciliations/", headers=staff_headers, json={
        "date": "2024-06-11", "cashier_id": cashier.id, "cash_at_hand": "50.004",
    })

    assert resp.status_code == 400
    assert resp.json()["detail"] == "cash_at_hand cannot have more than 2 decimal places"
    assert client.get("/api/reconciliations/", headers=staff_headers).json() == []
