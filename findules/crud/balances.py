from typing import Optional

from sqlalchemy.orm import Session

from findules.models import BranchBalance, BranchBalanceTransaction
from findules.services.ledger import BalanceState, LedgerResult


def get_balance(db: Session, branch_id: int, for_update: bool = False) -> Optional[BranchBalance]:
    """Fetch a branch's balance row, optionally locking it for the transaction."""
    query = db.query(BranchBalance).filter(BranchBalance.branch_id == branch_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def to_state(balance: Optional[BranchBalance]) -> Optional[BalanceState]:
    if balance is None:
        return None
    return BalanceState(
        opening_balance=balance.opening_balance,
        current_balance=balance.current_balance,
        total_issued=balance.total_issued,
        total_retired=balance.total_retired,
    )


def apply_ledger_result(
    db: Session,
    branch_id: int,
    balance: Optional[BranchBalance],
    result: LedgerResult,
    reference: Optional[str] = None,
) -> BranchBalance:
    """
    Write a computed ledger result onto the ORM row and stage its ledger entry.

    Creates the balance row when ``balance`` is None. Nothing is committed; the
    caller commits the balance and the entry together.
    """
    if balance is None:
        balance = BranchBalance(branch_id=branch_id)
        db.add(balance)

    state = result.balance
    balance.opening_balance = state.opening_balance
    balance.current_balance = state.current_balance
    balance.total_issued = state.total_issued
    balance.total_retired = state.total_retired

    entry = result.transaction
    db.add(BranchBalanceTransaction(
        branch_balance=balance,
        transaction_type=entry.transaction_type,
        amount=entry.amount,
        balance_before=entry.balance_before,
        balance_after=entry.balance_after,
        reference=reference or entry.reference,
        performed_by=entry.performed_by,
        notes=entry.notes,
    ))
    return balance
