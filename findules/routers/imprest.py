import logging
from datetime import date as date_type, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from findules.crud.balances import apply_ledger_result, get_balance, to_state
from findules.crud.session import commit_or_raise
from findules.database import get_db
from findules.exceptions import ConflictError, NotFoundError, ValidationError
from findules.models import Imprest, ImprestCategory, ImprestStatus, Role, User
from findules.schemas.imprest import ImprestCreate, ImprestRead, ImprestRetire
from findules.security import get_current_user, is_manager, require_roles
from findules.services import ledger
from findules.services.imprest import as_utc, compute_retirement, overdue_cutoff, validate_issue
from findules.utils.audit import get_client_ip, record_audit
from findules.utils.dates import day_end, day_start
from findules.utils.folios import next_imprest_number

logger = logging.getLogger(__name__)

router = APIRouter()


def imprest_query(
    db: Session,
    current_user: User,
    status: Optional[ImprestStatus] = None,
    staff_name: Optional[str] = None,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
):
    """
    Listing query shared by the API and the exports.

    ``status=OVERDUE`` selects ISSUED records past the allowance and
    ``status=ISSUED`` only the ones still within it.
    """
    query = db.query(Imprest)
    if not is_manager(current_user):
        query = query.filter(Imprest.branch_id == current_user.branch_id)

    cutoff = overdue_cutoff()
    if status == ImprestStatus.OVERDUE:
        query = query.filter(Imprest.status == ImprestStatus.ISSUED, Imprest.date_issued < cutoff)
    elif status == ImprestStatus.ISSUED:
        query = query.filter(Imprest.status == ImprestStatus.ISSUED, Imprest.date_issued >= cutoff)
    elif status:
        query = query.filter(Imprest.status == status)

    if staff_name:
        query = query.filter(Imprest.staff_name.ilike(f"%{staff_name}%"))
    if start_date:
        query = query.filter(Imprest.date_issued >= day_start(start_date))
    if end_date:
        query = query.filter(Imprest.date_issued < day_end(end_date))

    return query.order_by(Imprest.date_issued.desc(), Imprest.id.desc())


def _get_for_user(db: Session, imprest_no: str, current_user: User, for_update: bool = False) -> Imprest:
    query = db.query(Imprest).filter(Imprest.imprest_no == imprest_no)
    if for_update:
        query = query.with_for_update()
    imprest = query.first()
    if not imprest:
        raise NotFoundError("Imprest not found")
    if not is_manager(current_user) and imprest.branch_id != current_user.branch_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return imprest


@router.get("/", response_model=List[ImprestRead])
def read_imprest(
    status: Optional[ImprestStatus] = None,
    staff_name: Optional[str] = None,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return imprest_query(db, current_user, status, staff_name, start_date, end_date).all()


@router.post("/", response_model=ImprestRead, status_code=201)
def issue_imprest(
    payload: ImprestCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Issue an imprest against the user's branch balance.

    The imprest row, the balance debit and its ledger entry commit together.
    """
    # 1. Validate before touching anything
    amount = validate_issue(payload.staff_name, payload.amount, payload.category, payload.purpose)

    balance = get_balance(db, current_user.branch_id, for_update=True)
    if not balance:
        raise ValidationError("Branch balance not initialized. Please contact administrator.")
    result = ledger.issue_imprest(to_state(balance), amount, current_user.id, payload.staff_name)

    # 2. Persist
    imprest_no = next_imprest_number(db)
    imprest = Imprest(
        imprest_no=imprest_no,
        staff_name=payload.staff_name.strip(),
        amount=amount,
        category=ImprestCategory(payload.category),
        purpose=payload.purpose.strip(),
        date_issued=as_utc(payload.date_issued) if payload.date_issued else datetime.now(timezone.utc),
        status=ImprestStatus.ISSUED,
        issued_by=current_user.id,
        branch_id=current_user.branch_id,
    )
    db.add(imprest)
    apply_ledger_result(db, current_user.branch_id, balance, result, reference=imprest_no)
    commit_or_raise(db, "issue imprest")
    db.refresh(imprest)
    logger.info("Imprest %s issued to %s for %s by %s", imprest_no, imprest.staff_name, amount, current_user.id)

    record_audit(
        db, current_user.id, "CREATE_IMPREST", "IMPREST",
        {
            "imprest_no": imprest_no,
            "staff_name": imprest.staff_name,
            "amount": amount,
            "remaining_balance": result.balance.current_balance,
        },
        get_client_ip(request),
    )
    return imprest


@router.get("/{imprest_no}", response_model=ImprestRead)
def read_imprest_detail(
    imprest_no: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_for_user(db, imprest_no, current_user)


@router.post("/{imprest_no}/retire", response_model=ImprestRead)
def retire_imprest(
    imprest_no: str,
    payload: ImprestRetire,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Account for an imprest. The unspent balance goes back to the branch."""
    imprest = _get_for_user(db, imprest_no, current_user, for_update=True)
    retirement = compute_retirement(imprest.amount, imprest.status, payload.amount_spent)

    imprest.status = retirement.status
    imprest.amount_spent = retirement.amount_spent
    imprest.balance = retirement.balance
    imprest.date_retired = as_utc(payload.date_retired) if payload.date_retired else datetime.now(timezone.utc)
    imprest.receipts = payload.receipts
    imprest.retirement_notes = payload.retirement_notes
    imprest.retired_by = current_user.id

    if retirement.balance > 0:
        balance = get_balance(db, imprest.branch_id, for_update=True)
        if balance:
            result = ledger.return_imprest_balance(
                to_state(balance), retirement.balance, imprest_no, current_user.id,
                f"Unspent balance returned from {imprest_no}",
            )
            apply_ledger_result(db, imprest.branch_id, balance, result)
        else:
            logger.warning("Imprest %s retired but branch %s has no balance to credit", imprest_no, imprest.branch_id)

    commit_or_raise(db, "retire imprest")
    db.refresh(imprest)
    logger.info("Imprest %s retired by %s (spent %s)", imprest_no, current_user.id, retirement.amount_spent)

    record_audit(
        db, current_user.id, "RETIRE_IMPREST", "IMPREST",
        {"imprest_no": imprest_no, "amount_spent": retirement.amount_spent, "balance": retirement.balance},
        get_client_ip(request),
    )
    return imprest


@router.delete("/{imprest_no}")
def delete_imprest(
    imprest_no: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MANAGER)),
):
    imprest = _get_for_user(db, imprest_no, current_user, for_update=True)
    if imprest.status == ImprestStatus.RETIRED:
        raise ConflictError("Cannot delete retired imprest")

    balance = get_balance(db, imprest.branch_id, for_update=True)
    if balance:
        result = ledger.reverse_imprest(to_state(balance), imprest.amount, imprest_no, current_user.id)
        apply_ledger_result(db, imprest.branch_id, balance, result)

    details = {"imprest_no": imprest_no, "staff_name": imprest.staff_name, "amount": imprest.amount}
    db.delete(imprest)
    commit_or_raise(db, "delete imprest")
    logger.info("Imprest %s deleted by %s", imprest_no, current_user.id)

    record_audit(db, current_user.id, "DELETE_IMPREST", "IMPREST", details, get_client_ip(request))
    return {"success": True, "message": "Imprest deleted successfully"}
