from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from findules.models import DocumentSequence, FuelCoupon, Imprest, Reconciliation

IMPREST_SEQUENCE = "IMP"
RECONCILIATION_SEQUENCE = "REC"
FUEL_COUPON_SEQUENCE = "FC"

# Table whose row count seeds each sequence the first time it is used
_SEEDED_FROM = {
    IMPREST_SEQUENCE: Imprest,
    RECONCILIATION_SEQUENCE: Reconciliation,
    FUEL_COUPON_SEQUENCE: FuelCoupon,
}


def format_imprest_number(sequence: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"IMP-{now.year}-{now.month:02d}-{sequence:04d}"


def format_reconciliation_number(sequence: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"REC-{now.year}-{now.month:02d}-{sequence:04d}"


def format_fuel_coupon_code(sequence: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"FC-{now:%Y%m%d}-{sequence:04d}"


def get_next_sequence(db: Session, name: str) -> int:
    """
    Reserve the next number of a document sequence.

    The counter row is locked for the rest of the caller's transaction, so the
    number is only consumed when the caller commits the document that uses it.
    A missing counter starts from the current row count of its table.
    """
    seq = db.query(DocumentSequence).filter(DocumentSequence.name == name).with_for_update().first()
    if seq is None:
        model = _SEEDED_FROM[name]
        seq = DocumentSequence(name=name, last_value=db.query(func.count(model.id)).scalar() or 0)
        db.add(seq)

    seq.last_value += 1
    db.flush()
    return seq.last_value


def next_imprest_number(db: Session) -> str:
    return format_imprest_number(get_next_sequence(db, IMPREST_SEQUENCE))


def next_reconciliation_number(db: Session) -> str:
    return format_reconciliation_number(get_next_sequence(db, RECONCILIATION_SEQUENCE))


def next_fuel_coupon_code(db: Session) -> str:
    return format_fuel_coupon_code(get_next_sequence(db, FUEL_COUPON_SEQUENCE))
