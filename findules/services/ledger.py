"""
Branch balance ledger arithmetic.

Every function here is pure: it takes the current balance figures and returns
the new figures together with the ledger entry that describes the change. The
caller persists both in a single transaction.

Amounts on ledger entries are signed, so for every entry
``balance_after == balance_before + amount``. Summing the amounts of a
branch's history therefore reproduces its current balance.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Optional

from findules.exceptions import ValidationError
from findules.models.balances import BalanceTransactionType
from findules.utils.money import ZERO, parse_decimal


@dataclass(frozen=True)
class BalanceState:
    opening_balance: Decimal = ZERO
    current_balance: Decimal = ZERO
    total_issued: Decimal = ZERO
    total_retired: Decimal = ZERO


@dataclass(frozen=True)
class LedgerEntry:
    transaction_type: BalanceTransactionType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    performed_by: Any
    notes: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class LedgerResult:
    balance: BalanceState
    transaction: LedgerEntry


def top_up(existing: Optional[BalanceState], amount: Any, performed_by: Any, notes: Optional[str] = None) -> LedgerResult:
    """
    Create a branch balance or add to an existing one.

    Creating accepts zero (an empty float is a valid starting point); topping
    up requires a positive amount. Top-ups raise the opening balance as well,
    since every top-up counts as fresh opening capital.
    """
    amount = parse_decimal(amount, "amount", default=None)

    if existing is None:
        if amount < 0:
            raise ValidationError("Amount must be a valid non-negative number", {"field": "amount"})
        entry = LedgerEntry(
            transaction_type=BalanceTransactionType.OPENING_BALANCE,
            amount=amount,
            balance_before=ZERO,
            balance_after=amount,
            performed_by=performed_by,
            notes=notes or "Initial opening balance",
        )
        return LedgerResult(BalanceState(opening_balance=amount, current_balance=amount), entry)

    if amount <= 0:
        raise ValidationError("Amount must be a valid positive number", {"field": "amount"})

    new_current = existing.current_balance + amount
    entry = LedgerEntry(
        transaction_type=BalanceTransactionType.TOP_UP,
        amount=amount,
        balance_before=existing.current_balance,
        balance_after=new_current,
        performed_by=performed_by,
        notes=notes or "Balance top up by manager",
    )
    new_state = replace(
        existing,
        opening_balance=existing.opening_balance + amount,
        current_balance=new_current,
    )
    return LedgerResult(new_state, entry)


def issue_imprest(existing: BalanceState, amount: Decimal, performed_by: Any, staff_name: str,
                  reference: Optional[str] = None) -> LedgerResult:
    """Debit the float for a newly issued imprest."""
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0", {"field": "amount"})
    if existing.current_balance < amount:
        raise ValidationError(
            "Insufficient branch balance",
            {"available_balance": str(existing.current_balance), "requested_amount": str(amount)},
        )

    new_current = existing.current_balance - amount
    entry = LedgerEntry(
        transaction_type=BalanceTransactionType.IMPREST_ISSUED,
        amount=-amount,
        balance_before=existing.current_balance,
        balance_after=new_current,
        performed_by=performed_by,
        notes=f"Imprest issued to {staff_name}",
        reference=reference,
    )
    new_state = replace(existing, current_balance=new_current, total_issued=existing.total_issued + amount)
    return LedgerResult(new_state, entry)


def return_imprest_balance(existing: BalanceState, returned: Decimal, reference: str, performed_by: Any, notes: str) -> LedgerResult:
    """Credit the unspent part of a retired imprest back to the float."""
    if returned < 0:
        raise ValidationError("Returned balance cannot be negative", {"field": "balance"})

    new_current = existing.current_balance + returned
    entry = LedgerEntry(
        transaction_type=BalanceTransactionType.IMPREST_RETIRED,
        amount=returned,
        balance_before=existing.current_balance,
        balance_after=new_current,
        performed_by=performed_by,
        notes=notes,
        reference=reference,
    )
    new_state = replace(existing, current_balance=new_current, total_retired=existing.total_retired + returned)
    return LedgerResult(new_state, entry)


def reverse_imprest(existing: BalanceState, amount: Decimal, reference: str, performed_by: Any) -> LedgerResult:
    """Put back the full amount of an imprest deleted before retirement."""
    new_current = existing.current_balance + amount
    entry = LedgerEntry(
        transaction_type=BalanceTransactionType.IMPREST_REVERSED,
        amount=amount,
        balance_before=existing.current_balance,
        balance_after=new_current,
        performed_by=performed_by,
        notes=f"Imprest {reference} deleted before retirement",
        reference=reference,
    )
    new_state = replace(existing, current_balance=new_current, total_issued=existing.total_issued - amount)
    return LedgerResult(new_state, entry)
