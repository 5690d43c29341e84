import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from findules.crud.session import commit_or_raise
from findules.crud.users import get_user_by_email
from findules.database import get_db
from findules.exceptions import ValidationError
from findules.models import User
from findules.schemas.auth import PasswordChange, Token
from findules.schemas.users import UserRead
from findules.security import (
    create_access_token, get_current_user, get_password_hash, login_limiter, verify_password,
)
from findules.utils.audit import get_client_ip, record_audit

logger = logging.getLogger(__name__)

router = APIRouter()


# OAuth2 form: the "username" field carries the email address
@router.post("/login", response_model=Token)
def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    ip_address = get_client_ip(request)

    # 1. Throttle per client IP
    limit = login_limiter.check(ip_address)
    if not limit.allowed:
        logger.warning("Login rate limit hit for %s", ip_address)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Please try again later.",
            headers={"Retry-After": str(limit.retry_after)},
        )

    # 2. Credentials
    user = get_user_by_email(db, form_data.username)
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive. Please contact administrator.",
        )

    # 3. Token
    access_token = create_access_token(user)
    logger.info("User %s logged in from %s", user.id, ip_address)
    record_audit(db, user.id, "LOGIN", "AUTH", {"email": user.email}, ip_address)

    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/change-password")
def change_password(
    payload: PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise ValidationError("Current password is incorrect", {"field": "current_password"})

    current_user.password_hash = get_password_hash(payload.new_password)
    commit_or_raise(db, "change password")

    record_audit(db, current_user.id, "CHANGE_PASSWORD", "AUTH", None, get_client_ip(request))
    return {"success": True, "message": "Password changed successfully"}
