from datetime import date as date_type
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from findules.database import get_db
from findules.models import AuditLog, Role, User
from findules.schemas.audit import AuditLogRead
from findules.security import require_roles
from findules.utils.dates import day_end, day_start

router = APIRouter()


@router.get("/", response_model=List[AuditLogRead])
def read_audit_logs(
    module: Optional[str] = None,
    user_id: Optional[int] = None,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MANAGER)),
):
    """Newest 100 entries matching the filters."""
    query = db.query(AuditLog)
    if module:
        query = query.filter(AuditLog.module == module.upper())
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if start_date:
        query = query.filter(AuditLog.timestamp >= day_start(start_date))
    if end_date:
        query = query.filter(AuditLog.timestamp < day_end(end_date))
    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(100).all()
