import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from findules.crud.session import commit_or_raise
from findules.crud.users import get_user, get_user_by_email
from findules.database import get_db
from findules.exceptions import ConflictError, NotFoundError, ValidationError
from findules.models import Branch, RecordStatus, Role, User
from findules.schemas.users import UserCreate, UserRead, UserUpdate
from findules.security import get_password_hash, require_roles
from findules.utils.audit import get_client_ip, record_audit

logger = logging.getLogger(__name__)

router = APIRouter()

manager_only = require_roles(Role.MANAGER)


def _ensure_branch(db: Session, branch_id: int) -> None:
    if not db.query(Branch).filter(Branch.id == branch_id).first():
        raise ValidationError("Invalid branch", {"field": "branch_id"})


# --- 1. LIST ---
@router.get("/", response_model=List[UserRead])
def read_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_only),
):
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).offset(skip).limit(limit).all()


# --- 2. CREATE ---
@router.post("/", response_model=UserRead, status_code=201)
def create_user(
    user_in: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_only),
):
    email = user_in.email.lower()
    if get_user_by_email(db, email):
        raise ConflictError("Email already in use")
    _ensure_branch(db, user_in.branch_id)

    new_user = User(
        name=user_in.name,
        email=email,
        password_hash=get_password_hash(user_in.password),
        role=user_in.role,
        branch_id=user_in.branch_id,
    )
    db.add(new_user)
    commit_or_raise(db, "create user", duplicate_message="Email already in use")
    db.refresh(new_user)
    logger.info("User %s created by %s", new_user.id, current_user.id)

    record_audit(db, current_user.id, "CREATE_USER", "USER_MANAGEMENT",
                 {"user_id": new_user.id, "email": new_user.email, "role": new_user.role.value},
                 get_client_ip(request))
    return new_user


# --- 3. UPDATE (role, branch, status, password) ---
@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_only),
):
    user_db = get_user(db, user_id)
    if not user_db:
        raise NotFoundError("User not found")

    update_data = user_in.model_dump(exclude_unset=True)

    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
        other = get_user_by_email(db, update_data["email"])
        if other and other.id != user_db.id:
            raise ConflictError("Email already in use")
    if update_data.get("branch_id") is not None:
        _ensure_branch(db, update_data["branch_id"])

    password_raw = update_data.pop("password", None)
    if password_raw:
        user_db.password_hash = get_password_hash(password_raw)

    for field, value in update_data.items():
        if value is not None:
            setattr(user_db, field, value)

    commit_or_raise(db, "update user", duplicate_message="Email already in use")
    db.refresh(user_db)

    record_audit(db, current_user.id, "UPDATE_USER", "USER_MANAGEMENT",
                 {"user_id": user_db.id, "fields": sorted(user_in.model_dump(exclude_unset=True))},
                 get_client_ip(request))
    return user_db


# --- 4. DEACTIVATE (soft delete) ---
@router.delete("/{user_id}", response_model=UserRead)
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_only),
):
    user_db = get_user(db, user_id)
    if not user_db:
        raise NotFoundError("User not found")
    if user_db.id == current_user.id:
        raise ValidationError("You cannot deactivate your own account")
    if not user_db.is_active:
        raise ConflictError("User is already inactive")

    user_db.status = RecordStatus.INACTIVE
    commit_or_raise(db, "deactivate user")
    db.refresh(user_db)

    record_audit(db, current_user.id, "DEACTIVATE_USER", "USER_MANAGEMENT",
                 {"user_id": user_db.id, "email": user_db.email}, get_client_ip(request))
    return user_db
