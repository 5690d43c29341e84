from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from findules.models import AuditLog, BranchBalance, BranchBalanceTransaction

from .conftest import auth_headers


def post_balance(client, headers, branch_id, amount, **extra):
    return client.post("/api/branch-balance/", headers=headers, json={"branch_id": branch_id, "amount": amount, **extra})


def test_first_call_creates_then_tops_up(client, db, branch, manager_headers):
    first = post_balance(client, manager_headers, branch.id, "5000")
    assert first.status_code == 200
    assert Decimal(first.json()["current_balance"]) == Decimal("5000")

    second = post_balance(client, manager_headers, branch.id, "2000")
    assert second.status_code == 200
    body = second.json()
    assert Decimal(body["current_balance"]) == Decimal("7000")
    assert Decimal(body["opening_balance"]) == Decimal("7000")

    history = client.get(f"/api/branch-balance/{branch.id}/transactions", headers=manager_headers).json()
    assert [t["transaction_type"] for t in history] == ["TOP_UP", "OPENING_BALANCE"]
    top_up, opening = history
    assert Decimal(opening["balance_before"]) == 0
    assert Decimal(opening["balance_after"]) == Decimal("5000")
    assert Decimal(top_up["balance_before"]) == Decimal("5000")
    assert Decimal(top_up["balance_after"]) == Decimal("7000")

    db.expire_all()
    actions = [a.action for a in db.query(AuditLog).order_by(AuditLog.id)]
    assert actions == ["CREATE_BRANCH_BALANCE", "TOP_UP_BRANCH_BALANCE"]


def test_balance_equals_sum_of_transactions(client, db, branch, manager_headers):
    amounts = ["1000.25", "250.50", "3000", "75.25"]
    for amount in amounts:
        assert post_balance(client, manager_headers, branch.id, amount).status_code == 200

    db.expire_all()
    balance = db.query(BranchBalance).filter(BranchBalance.branch_id == branch.id).one()
    total = sum(t.amount for t in db.query(BranchBalanceTransaction).filter_by(branch_balance_id=balance.id))
    assert balance.current_balance == sum(Decimal(a) for a in amounts)
    assert total == balance.current_balance
    assert balance.version == len(amounts)


def test_top_up_validation(client, branch, manager_headers):
    assert post_balance(client, manager_headers, branch.id, "-1").status_code == 400
    assert post_balance(client, manager_headers, branch.id, "0").status_code == 200
    # Zero only allowed when creating
    resp = post_balance(client, manager_headers, branch.id, "0")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Amount must be a valid positive number"

    assert post_balance(client, manager_headers, 9999, "10").status_code == 404


def test_put_only_tops_up_existing_balances(client, branch, manager_headers):
    missing = client.put(f"/api/branch-balance/{branch.id}", headers=manager_headers, json={"amount": "100"})
    assert missing.status_code == 404

    post_balance(client, manager_headers, branch.id, "100")
    resp = client.put(f"/api/branch-balance/{branch.id}", headers=manager_headers,
                      json={"amount": "50", "notes": "Weekend float"})
    assert resp.status_code == 200
    assert Decimal(resp.json()["current_balance"]) == Decimal("150")

    detail = client.get(f"/api/branch-balance/{branch.id}", headers=manager_headers, params={"limit": 1}).json()
    assert detail["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
    assert detail["transactions"][0]["notes"] == "Weekend float"


def test_role_gates(client, db, branch, other_branch, manager_headers, branch_admin, staff_headers):
    post_balance(client, manager_headers, branch.id, "100")
    post_balance(client, manager_headers, other_branch.id, "200")
    admin_headers = auth_headers(branch_admin)

    # Staff see nothing and change nothing
    assert client.get("/api/branch-balance/", headers=staff_headers).status_code == 403
    assert post_balance(client, staff_headers, branch.id, "10").status_code == 403

    # Branch admins only see their own branch
    listed = client.get("/api/branch-balance/", headers=admin_headers).json()
    assert [b["branch_id"] for b in listed] == [branch.id]
    assert client.get(f"/api/branch-balance/{other_branch.id}", headers=admin_headers).status_code == 403
    assert post_balance(client, admin_headers, branch.id, "10").status_code == 403

    assert len(client.get("/api/branch-balance/", headers=manager_headers).json()) == 2


def test_sub_cent_top_up_is_rejected_and_changes_nothing(client, db, branch, manager_headers):
    post_balance(client, manager_headers, branch.id, "100")

    resp = client.put(f"/api/branch-balance/{branch.id}", headers=manager_headers, json={"amount": "0.001"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"

    db.expire_all()
    balance = db.query(BranchBalance).filter(BranchBalance.branch_id == branch.id).one()
    assert balance.current_balance == Decimal("100")
    types = [t.transaction_type.value for t in db.query(BranchBalanceTransaction)]
    assert types == ["OPENING_BALANCE"]


@pytest.fixture()
def failing_audit_writes():
    def refuse_audit_rows(session, flush_context, instances):
        if any(isinstance(obj, AuditLog) for obj in session.new):
            raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk I/O error"))

    event.listen(Session, "before_flush", refuse_audit_rows)
    yield
    event.remove(Session, "before_flush", refuse_audit_rows)


def test_failed_audit_write_keeps_the_top_up(client, db, branch, manager_headers, failing_audit_writes):
    post_balance(client, manager_headers, branch.id, "100")
    resp = client.put(f"/api/branch-balance/{branch.id}", headers=manager_headers, json={"amount": "25"})

    assert resp.status_code == 200
    assert Decimal(resp.json()["current_balance"]) == Decimal("125")

    db.expire_all()
    types = [t.transaction_type.value for t in db.query(BranchBalanceTransaction).order_by(BranchBalanceTransaction.id)]
    assert types == ["OPENING_BALANCE", "TOP_UP"]
    assert db.query(AuditLog).count() == 0
