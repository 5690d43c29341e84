from decimal import Decimal

import pytest

from findules.exceptions import ValidationError
from findules.models import BalanceTransactionType
from findules.services.ledger import BalanceState, issue_imprest, return_imprest_balance, reverse_imprest, top_up


def test_first_top_up_opens_the_balance():
    result = top_up(None, Decimal("5000"), performed_by=1)

    assert result.balance.opening_balance == Decimal("5000")
    assert result.balance.current_balance == Decimal("5000")
    entry = result.transaction
    assert entry.transaction_type == BalanceTransactionType.OPENING_BALANCE
    assert entry.balance_before == Decimal("0")
    assert entry.balance_after == Decimal("5000")
    assert entry.notes == "Initial opening balance"


def test_second_top_up_adds_to_opening_and_current():
    first = top_up(None, Decimal("5000"), performed_by=1)
    second = top_up(first.balance, Decimal("2000"), performed_by=1)

    assert second.transaction.transaction_type == BalanceTransactionType.TOP_UP
    assert second.transaction.balance_before == Decimal("5000")
    assert second.transaction.balance_after == Decimal("7000")
    assert second.balance.opening_balance == Decimal("7000")
    assert second.balance.current_balance == Decimal("7000")
    assert second.transaction.notes == "Balance top up by manager"


def test_zero_is_allowed_only_when_creating():
    created = top_up(None, "0", performed_by=1)
    assert created.balance.current_balance == Decimal("0")

    with pytest.raises(ValidationError):
        top_up(created.balance, "0", performed_by=1)


@pytest.mark.parametrize("amount", ["-1", "abc", None, "", "NaN"])
def test_invalid_amounts_are_rejected(amount):
    with pytest.raises(ValidationError):
        top_up(BalanceState(), amount, performed_by=1)


def test_negative_opening_amount_is_rejected():
    with pytest.raises(ValidationError):
        top_up(None, "-5", performed_by=1)


def test_custom_notes_are_kept():
    result = top_up(None, "100", performed_by=1, notes="Float for March")
    assert result.transaction.notes == "Float for March"


def test_balance_equals_sum_of_entries_after_many_top_ups():
    amounts = [Decimal("1000.50"), Decimal("250.25"), Decimal("3000"), Decimal("0.25")]
    state = None
    entries = []
    for amount in amounts:
        result = top_up(state, amount, performed_by=1)
        state = result.balance
        entries.append(result.transaction)

    assert state.current_balance == sum(amounts)
    assert sum(e.amount for e in entries) == state.current_balance
    for entry in entries:
        assert entry.balance_after == entry.balance_before + entry.amount


def test_issue_imprest_debits_with_a_negative_entry():
    state = BalanceState(opening_balance=Decimal("1000"), current_balance=Decimal("1000"))
    result = issue_imprest(state, Decimal("300"), performed_by=1, staff_name="Musa", reference="IMP-2024-01-0001")

    assert result.balance.current_balance == Decimal("700")
    assert result.balance.total_issued == Decimal("300")
    assert result.transaction.amount == Decimal("-300")
    assert result.transaction.balance_after == result.transaction.balance_before + result.transaction.amount
    assert result.transaction.reference == "IMP-2024-01-0001"


def test_issue_imprest_beyond_balance_fails():
    state = BalanceState(current_balance=Decimal("100"))
    with pytest.raises(ValidationError) as exc:
        issue_imprest(state, Decimal("100.01"), performed_by=1, staff_name="Musa")

    assert exc.value.message == "Insufficient branch balance"
    assert exc.value.details["available_balance"] == "100"


def test_returning_and_reversing_credit_the_balance():
    state = BalanceState(current_balance=Decimal("700"), total_issued=Decimal("300"))

    returned = return_imprest_balance(state, Decimal("50"), "IMP-1", 1, "returned")
    assert returned.balance.current_balance == Decimal("750")
    assert returned.balance.total_retired == Decimal("50")
    assert returned.transaction.transaction_type == BalanceTransactionType.IMPREST_RETIRED

    reversed_ = reverse_imprest(state, Decimal("300"), "IMP-1", 1)
    assert reversed_.balance.current_balance == Decimal("1000")
    assert reversed_.balance.total_issued == Decimal("0")
    assert reversed_.transaction.transaction_type == BalanceTransactionType.IMPREST_REVERSED
