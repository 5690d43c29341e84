import logging
from datetime import date as date_type
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from findules.crud.session import commit_or_raise
from findules.database import get_db
from findules.exceptions import ConflictError, NotFoundError, ValidationError
from findules.models import Cashier, Reconciliation, ReconciliationStatus, User
from findules.schemas.reconciliations import PreviousBalance, ReconciliationCreate, ReconciliationRead
from findules.security import get_current_user, is_manager
from findules.services.reconciliation import ReconciliationInput, compute_reconciliation
from findules.utils.audit import get_client_ip, record_audit
from findules.utils.folios import next_reconciliation_number

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_MESSAGE = "A reconciliation already exists for this cashier on this date"


def reconciliation_query(db: Session, current_user: User, date: Optional[date_type] = None,
                         branch_id: Optional[int] = None):
    """Base listing query, scoped to the user's branch unless they are a manager."""
    query = db.query(Reconciliation)
    if not is_manager(current_user):
        query = query.filter(Reconciliation.branch_id == current_user.branch_id)
    elif branch_id:
        query = query.filter(Reconciliation.branch_id == branch_id)
    if date:
        query = query.filter(Reconciliation.date == date)
    return query.order_by(Reconciliation.date.desc(), Reconciliation.id.desc())


@router.get("/", response_model=List[ReconciliationRead])
def read_reconciliations(
    date: Optional[date_type] = None,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return reconciliation_query(db, current_user, date, branch_id).all()


# Declared before /{serial_number} routes so the path is not captured
@router.get("/previous-balance", response_model=PreviousBalance)
def read_previous_balance(
    cashier_id: int = Query(...),
    date: date_type = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Closing count of the cashier's latest earlier reconciliation, to carry forward as today's opening."""
    previous = (
        db.query(Reconciliation)
        .filter(Reconciliation.cashier_id == cashier_id, Reconciliation.date < date)
        .order_by(Reconciliation.date.desc())
        .first()
    )
    if not previous:
        return {"has_history": False, "message": "No previous reconciliation found for this cashier"}

    return {
        "has_history": True,
        "previous_closing_balance": previous.actual_closing_balance,
        "previous_date": previous.date,
        "previous_serial_number": previous.serial_number,
    }


@router.post("/", response_model=ReconciliationRead, status_code=201)
def create_reconciliation(
    payload: ReconciliationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # 1. Cashier and scope
    cashier = db.query(Cashier).filter(Cashier.id == payload.cashier_id).first()
    if not cashier:
        raise ValidationError("Invalid cashier selected", {"field": "cashier_id"})
    if not is_manager(current_user) and cashier.branch_id != current_user.branch_id:
        raise HTTPException(status_code=403, detail="Access denied to this branch")

    existing = db.query(Reconciliation).filter(
        Reconciliation.cashier_id == cashier.id,
        Reconciliation.date == payload.date,
    ).first()
    if existing:
        raise ConflictError(DUPLICATE_MESSAGE, {"serial_number": existing.serial_number})

    # 2. Figures
    figures_in = ReconciliationInput.from_mapping(payload.model_dump())
    figures = compute_reconciliation(figures_in)

    # 3. Persist
    ip_address = get_client_ip(request)
    reconciliation = Reconciliation(
        serial_number=next_reconciliation_number(db),
        date=payload.date,
        cashier_id=cashier.id,
        cashier_name=cashier.name,
        branch_id=cashier.branch_id,
        actual_opening_balance=figures_in.actual_opening_balance,
        actual_total_sales=figures_in.total_sales,
        pos_transactions_amount=figures_in.pos_transactions_amount,
        cash_transaction=figures_in.cash_transaction,
        transfers_in=figures_in.transfers_in,
        transfers_out=figures_in.transfers_out,
        discounts_given=figures_in.discounts_given,
        refunds_issued=figures_in.refunds_issued,
        cash_withdrawn=figures_in.cash_withdrawn,
        actual_closing_balance=figures_in.cash_at_hand,
        withdrawal_recipient=payload.withdrawal_recipient,
        withdrawal_details=payload.withdrawal_details,
        teller_no=payload.teller_no,
        bank_name=payload.bank_name,
        branch_location=payload.branch_location,
        deposit_slip_no=payload.deposit_slip_no,
        deposit_slip_upload=payload.deposit_slip_upload,
        turn_over=figures.turn_over,
        expected_closing_balance=figures.expected_closing_balance,
        overage_shortage=figures.overage_shortage,
        variance_category=figures.variance_category,
        remarks=payload.remarks,
        submitted_by=current_user.id,
        created_by_ip=ip_address,
    )
    db.add(reconciliation)
    commit_or_raise(db, "create reconciliation", duplicate_message=DUPLICATE_MESSAGE)
    db.refresh(reconciliation)
    logger.info("Reconciliation %s recorded for cashier %s (%s)", reconciliation.serial_number,
                cashier.id, figures.variance_category.value)

    record_audit(db, current_user.id, "CREATE_RECONCILIATION", "RECONCILIATION",
                 {"reconciliation_id": reconciliation.serial_number, "cashier_name": cashier.name},
                 ip_address)
    return reconciliation


@router.patch("/{serial_number}/retire", response_model=ReconciliationRead)
def retire_reconciliation(
    serial_number: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark a reconciliation RETIRED. Figures are left as recorded."""
    reconciliation = (
        db.query(Reconciliation)
        .filter(Reconciliation.serial_number == serial_number)
        .with_for_update()
        .first()
    )
    if not reconciliation:
        raise NotFoundError("Reconciliation not found")
    if not is_manager(current_user) and reconciliation.branch_id != current_user.branch_id:
        raise HTTPException(status_code=403, detail="Access denied to this branch")
    if reconciliation.status == ReconciliationStatus.RETIRED:
        raise ConflictError("Reconciliation already retired")

    reconciliation.status = ReconciliationStatus.RETIRED
    commit_or_raise(db, "retire reconciliation")
    db.refresh(reconciliation)

    record_audit(db, current_user.id, "RETIRE_RECONCILIATION", "RECONCILIATION",
                 {"reconciliation_id": reconciliation.serial_number}, get_client_ip(request))
    return reconciliation
