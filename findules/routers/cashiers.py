import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from findules.crud.session import commit_or_raise
from findules.database import get_db
from findules.exceptions import ConflictError, NotFoundError, ValidationError
from findules.models import Branch, Cashier, RecordStatus, Role, User
from findules.schemas.branches import CashierCreate, CashierRead
from findules.security import get_current_user, is_manager, require_roles
from findules.utils.audit import get_client_ip, record_audit

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[CashierRead])
def read_cashiers(
    branch_id: Optional[int] = None,
    status: Optional[RecordStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cashiers to pick from when recording a reconciliation."""
    query = db.query(Cashier)
    if not is_manager(current_user):
        query = query.filter(Cashier.branch_id == current_user.branch_id)
    elif branch_id:
        query = query.filter(Cashier.branch_id == branch_id)
    if status:
        query = query.filter(Cashier.status == status)
    return query.order_by(Cashier.name).all()


@router.post("/", response_model=CashierRead, status_code=201)
def create_cashier(
    cashier_in: CashierCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MANAGER)),
):
    if not db.query(Branch).filter(Branch.id == cashier_in.branch_id).first():
        raise ValidationError("Invalid branch", {"field": "branch_id"})

    cashier = Cashier(name=cashier_in.name.strip(), branch_id=cashier_in.branch_id)
    db.add(cashier)
    commit_or_raise(db, "create cashier")
    db.refresh(cashier)

    record_audit(db, current_user.id, "CREATE_CASHIER", "USER_MANAGEMENT",
                 {"cashier_id": cashier.id, "name": cashier.name, "branch_id": cashier.branch_id},
                 get_client_ip(request))
    return cashier


@router.delete("/{cashier_id}", response_model=CashierRead)
def deactivate_cashier(
    cashier_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MANAGER)),
):
    # Reconciliations keep pointing at the cashier, so it is never removed
    cashier = db.query(Cashier).filter(Cashier.id == cashier_id).first()
    if not cashier:
        raise NotFoundError("Cashier not found")
    if cashier.status == RecordStatus.INACTIVE:
        raise ConflictError("Cashier is already inactive")

    cashier.status = RecordStatus.INACTIVE
    commit_or_raise(db, "deactivate cashier")
    db.refresh(cashier)

    record_audit(db, current_user.id, "DEACTIVATE_CASHIER", "USER_MANAGEMENT",
                 {"cashier_id": cashier.id, "name": cashier.name}, get_client_ip(request))
    return cashier
