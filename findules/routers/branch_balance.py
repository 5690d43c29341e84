import logging
import math
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from findules.crud.balances import apply_ledger_result, get_balance, to_state
from findules.crud.session import commit_or_raise
from findules.database import get_db
from findules.exceptions import NotFoundError
from findules.models import Branch, BranchBalance, BranchBalanceTransaction, Role, User
from findules.schemas.branch_balance import (
    BalanceTopUp, BalanceTransactionRead, BranchBalanceCreate, BranchBalanceDetail, BranchBalanceRead,
)
from findules.security import ensure_branch_access, is_manager, require_roles
from findules.services import ledger
from findules.utils.audit import get_client_ip, record_audit

logger = logging.getLogger(__name__)

router = APIRouter()

manager_only = require_roles(Role.MANAGER)
balance_viewers = require_roles(Role.MANAGER, Role.BRANCH_ADMIN)


def _get_existing(db: Session, branch_id: int) -> BranchBalance:
    balance = get_balance(db, branch_id)
    if not balance:
        raise NotFoundError("Branch balance not found")
    return balance


@router.get("/", response_model=List[BranchBalanceRead])
def read_balances(
    db: Session = Depends(get_db),
    current_user: User = Depends(balance_viewers),
):
    query = db.query(BranchBalance)
    if not is_manager(current_user):
        query = query.filter(BranchBalance.branch_id == current_user.branch_id)
    return query.order_by(BranchBalance.branch_id).all()


@router.post("/", response_model=BranchBalanceRead)
def create_or_top_up_balance(
    payload: BranchBalanceCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_only),
):
    """
    Initialise a branch's balance, or top it up when one already exists.

    The first call records an OPENING_BALANCE entry (zero allowed); later calls
    record TOP_UP entries and need a positive amount.
    """
    branch = db.query(Branch).filter(Branch.id == payload.branch_id).first()
    if not branch:
        raise NotFoundError("Branch not found")

    # 1. Lock and compute
    balance = get_balance(db, branch.id, for_update=True)
    is_new = balance is None
    result = ledger.top_up(to_state(balance), payload.amount, current_user.id, payload.notes)

    # 2. Balance row and ledger entry in one commit
    balance = apply_ledger_result(db, branch.id, balance, result)
    commit_or_raise(db, "update branch balance", duplicate_message="Branch balance was created by another request, please retry")
    db.refresh(balance)
    logger.info("Branch %s balance %s by %s: %s", branch.branch_code,
                "created" if is_new else "topped up", current_user.id, result.transaction.amount)

    # 3. Audit (best effort)
    record_audit(
        db, current_user.id,
        "CREATE_BRANCH_BALANCE" if is_new else "TOP_UP_BRANCH_BALANCE",
        "BRANCH_BALANCE",
        {
            "branch_id": branch.id,
            "branch_name": branch.branch_name,
            "amount": result.transaction.amount,
            "new_balance": result.balance.current_balance,
        },
        get_client_ip(request),
    )
    return balance


@router.get("/{branch_id}", response_model=BranchBalanceDetail)
def read_balance_detail(
    branch_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(balance_viewers),
):
    ensure_branch_access(current_user, branch_id)
    balance = _get_existing(db, branch_id)

    query = db.query(BranchBalanceTransaction).filter(BranchBalanceTransaction.branch_balance_id == balance.id)
    total = query.count()
    transactions = (
        query.order_by(BranchBalanceTransaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "balance": balance,
        "transactions": transactions,
        "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
    }


@router.put("/{branch_id}", response_model=BranchBalanceRead)
def top_up_balance(
    branch_id: int,
    payload: BalanceTopUp,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_only),
):
    balance = get_balance(db, branch_id, for_update=True)
    if not balance:
        raise NotFoundError("Branch balance not found")

    result = ledger.top_up(to_state(balance), payload.amount, current_user.id, payload.notes)
    apply_ledger_result(db, branch_id, balance, result)
    commit_or_raise(db, "top up branch balance")
    db.refresh(balance)
    logger.info("Branch %s topped up by %s: %s", branch_id, current_user.id, result.transaction.amount)

    record_audit(
        db, current_user.id, "TOP_UP_BRANCH_BALANCE", "BRANCH_BALANCE",
        {"branch_id": branch_id, "amount": result.transaction.amount, "new_balance": result.balance.current_balance},
        get_client_ip(request),
    )
    return balance


@router.get("/{branch_id}/transactions", response_model=List[BalanceTransactionRead])
def read_balance_transactions(
    branch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(balance_viewers),
):
    ensure_branch_access(current_user, branch_id)
    balance = _get_existing(db, branch_id)
    return (
        db.query(BranchBalanceTransaction)
        .filter(BranchBalanceTransaction.branch_balance_id == balance.id)
        .order_by(BranchBalanceTransaction.id.desc())
        .all()
    )
