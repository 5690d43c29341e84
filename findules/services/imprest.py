"""Imprest issuance checks, retirement arithmetic and the derived OVERDUE state."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from findules.config import settings
from findules.exceptions import ConflictError, ValidationError
from findules.models.imprest import ImprestCategory, ImprestStatus
from findules.utils.money import parse_decimal


@dataclass(frozen=True)
class RetirementResult:
    amount_spent: Decimal
    balance: Decimal
    status: ImprestStatus = ImprestStatus.RETIRED


def validate_issue(staff_name: Optional[str], amount: Any, category: Any, purpose: Optional[str]) -> Decimal:
    """Check an issuance request and return the parsed amount."""
    missing = [
        name
        for name, value in (("staff_name", staff_name), ("amount", amount), ("category", category), ("purpose", purpose))
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ValidationError("Missing required fields", {"fields": missing})

    try:
        ImprestCategory(category)
    except ValueError:
        raise ValidationError(f"Invalid imprest category: {category}", {"field": "category"})

    amount = parse_decimal(amount, "amount", default=None)
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0", {"field": "amount"})
    return amount


def compute_retirement(amount: Any, status: ImprestStatus, amount_spent: Any) -> RetirementResult:
    """
    Work out what an imprest retirement records.

    The already-retired check runs before any amount validation so a repeated
    retirement is always reported as a conflict.
    """
    if status == ImprestStatus.RETIRED:
        raise ConflictError("Imprest already retired")

    amount_spent = parse_decimal(amount_spent, "amount_spent", default=None)
    amount = parse_decimal(amount, "amount", default=None)

    if amount_spent < 0:
        raise ValidationError("Amount spent cannot be negative", {"field": "amount_spent"})
    if amount_spent > amount:
        raise ValidationError("Amount spent cannot exceed amount issued", {"field": "amount_spent"})

    return RetirementResult(amount_spent=amount_spent, balance=amount - amount_spent)


def as_utc(value: datetime) -> datetime:
    # Stored datetimes are UTC; SQLite hands them back naive
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_overdue(status: ImprestStatus, date_issued: Optional[datetime], now: Optional[datetime] = None,
               overdue_days: Optional[int] = None) -> bool:
    if status == ImprestStatus.RETIRED or date_issued is None:
        return False
    now = as_utc(now or datetime.now(timezone.utc))
    days = settings.imprest_overdue_days if overdue_days is None else overdue_days
    return now - as_utc(date_issued) > timedelta(days=days)


def effective_status(status: ImprestStatus, date_issued: Optional[datetime], now: Optional[datetime] = None) -> ImprestStatus:
    """Status as shown to users: ISSUED past the allowance reads as OVERDUE."""
    if is_overdue(status, date_issued, now):
        return ImprestStatus.OVERDUE
    return status


def overdue_cutoff(now: Optional[datetime] = None) -> datetime:
    """Imprest issued before this instant and still open is overdue."""
    now = as_utc(now or datetime.now(timezone.utc))
    return now - timedelta(days=settings.imprest_overdue_days)
