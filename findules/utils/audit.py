import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from findules.models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request: Optional[Request]) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    if request is None:
        return "unknown"
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return "unknown"


def record_audit(
    db: Session,
    user_id: Optional[int],
    action: str,
    module: str,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> Optional[AuditLog]:
    """
    Append an audit entry after the primary operation has committed.

    Best effort: a failure is logged and rolled back, never raised, so the
    caller's result stands.
    """
    try:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            module=module,
            details=jsonable_encoder(details or {}),
            ip_address=ip_address or "unknown",
        )
        db.add(entry)
        db.commit()
        return entry
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Failed to write audit log %s/%s for user %s", module, action, user_id, exc_info=True)
        return None
