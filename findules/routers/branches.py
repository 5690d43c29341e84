import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from findules.crud.session import commit_or_raise
from findules.database import get_db
from findules.exceptions import ConflictError
from findules.models import Branch, Role, User
from findules.schemas.branches import BranchCreate, BranchRead
from findules.security import require_roles
from findules.utils.audit import get_client_ip, record_audit

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[BranchRead])
def read_branches(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MANAGER)),
):
    return db.query(Branch).order_by(Branch.branch_name).all()


@router.post("/", response_model=BranchRead, status_code=201)
def create_branch(
    branch_in: BranchCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MANAGER)),
):
    code = branch_in.branch_code.strip().upper()
    if db.query(Branch).filter(Branch.branch_code == code).first():
        raise ConflictError("Branch code already exists")

    branch = Branch(branch_code=code, branch_name=branch_in.branch_name.strip(), location=branch_in.location)
    db.add(branch)
    commit_or_raise(db, "create branch", duplicate_message="Branch code already exists")
    db.refresh(branch)
    logger.info("Branch %s created by %s", branch.branch_code, current_user.id)

    record_audit(db, current_user.id, "CREATE_BRANCH", "BRANCH_MANAGEMENT",
                 {"branch_code": branch.branch_code, "branch_name": branch.branch_name},
                 get_client_ip(request))
    return branch
