from decimal import Decimal

import pytest

from findules.crud.session import commit_or_raise
from findules.exceptions import ConflictError
from findules.models import BranchBalance

from .conftest import TestingSessionLocal


def test_stale_balance_write_is_a_conflict(db, funded_branch):
    balance = db.query(BranchBalance).filter(BranchBalance.branch_id == funded_branch.id).one()
    assert balance.version == 1

    # Another request tops the balance up after we read it
    other = TestingSessionLocal()
    try:
        row = other.query(BranchBalance).filter(BranchBalance.branch_id == funded_branch.id).one()
        row.current_balance = row.current_balance + Decimal("500")
        other.commit()
    finally:
        other.close()

    balance.current_balance = balance.current_balance - Decimal("100")
    with pytest.raises(ConflictError) as exc:
        commit_or_raise(db, "issue imprest")
    assert exc.value.message == "Record was modified by another request, please retry"

    db.expire_all()
    refreshed = db.query(BranchBalance).filter(BranchBalance.branch_id == funded_branch.id).one()
    assert refreshed.current_balance == Decimal("50500")
    assert refreshed.version == 2
