import logging
from datetime import date as date_type, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from findules.crud.session import commit_or_raise
from findules.database import get_db
from findules.exceptions import NotFoundError, ValidationError
from findules.models import FuelCoupon, FuelType, Role, User
from findules.schemas.fuel_coupons import FuelCouponCreate, FuelCouponRead
from findules.security import get_current_user, is_manager, require_roles
from findules.services.imprest import as_utc
from findules.utils.audit import get_client_ip, record_audit
from findules.utils.dates import day_end, day_start
from findules.utils.folios import next_fuel_coupon_code
from findules.utils.money import ZERO, parse_decimal
from findules.utils.pdf_generator import generate_fuel_coupon_pdf

logger = logging.getLogger(__name__)

router = APIRouter()


def fuel_coupon_query(
    db: Session,
    current_user: User,
    fuel_type: Optional[FuelType] = None,
    staff_name: Optional[str] = None,
    plate_number: Optional[str] = None,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
):
    query = db.query(FuelCoupon)
    if not is_manager(current_user):
        query = query.filter(FuelCoupon.branch_id == current_user.branch_id)
    if fuel_type:
        query = query.filter(FuelCoupon.fuel_type == fuel_type)
    if staff_name:
        query = query.filter(FuelCoupon.staff_name.ilike(f"%{staff_name}%"))
    if plate_number:
        query = query.filter(FuelCoupon.plate_number.ilike(f"%{plate_number}%"))
    if start_date:
        query = query.filter(FuelCoupon.date >= day_start(start_date))
    if end_date:
        query = query.filter(FuelCoupon.date < day_end(end_date))
    return query.order_by(FuelCoupon.date.desc(), FuelCoupon.id.desc())


def _get_for_user(db: Session, document_code: str, current_user: User) -> FuelCoupon:
    coupon = db.query(FuelCoupon).filter(FuelCoupon.document_code == document_code).first()
    if not coupon:
        raise NotFoundError("Fuel coupon not found")
    if not is_manager(current_user) and coupon.branch_id != current_user.branch_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return coupon


@router.get("/", response_model=List[FuelCouponRead])
def read_fuel_coupons(
    fuel_type: Optional[FuelType] = None,
    staff_name: Optional[str] = None,
    plate_number: Optional[str] = None,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return fuel_coupon_query(db, current_user, fuel_type, staff_name, plate_number, start_date, end_date).all()


@router.post("/", response_model=FuelCouponRead, status_code=201)
def create_fuel_coupon(
    payload: FuelCouponCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    missing = [
        name for name in ("staff_name", "department", "fuel_type", "quantity_litres")
        if getattr(payload, name) in (None, "")
    ]
    if missing:
        raise ValidationError("Missing required fields", {"fields": missing})

    quantity = parse_decimal(payload.quantity_litres, "quantity_litres", default=None)
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0", {"field": "quantity_litres"})
    estimated = parse_decimal(payload.estimated_amount, "estimated_amount", default=ZERO)
    if estimated < 0:
        raise ValidationError("Estimated amount cannot be negative", {"field": "estimated_amount"})

    coupon = FuelCoupon(
        document_code=next_fuel_coupon_code(db),
        date=as_utc(payload.date) if payload.date else datetime.now(timezone.utc),
        staff_name=payload.staff_name.strip(),
        department=payload.department.strip(),
        unit=payload.unit,
        vehicle_type=payload.vehicle_type,
        plate_number=payload.plate_number,
        purpose=payload.purpose,
        fuel_type=payload.fuel_type,
        quantity_litres=quantity,
        estimated_amount=estimated,
        created_by=current_user.id,
        branch_id=current_user.branch_id,
    )
    db.add(coupon)
    commit_or_raise(db, "create fuel coupon")
    db.refresh(coupon)
    logger.info("Fuel coupon %s created by %s", coupon.document_code, current_user.id)

    record_audit(db, current_user.id, "CREATE_FUEL_COUPON", "FUEL_COUPON",
                 {"document_code": coupon.document_code, "staff_name": coupon.staff_name},
                 get_client_ip(request))
    return coupon


@router.get("/{document_code}", response_model=FuelCouponRead)
def read_fuel_coupon(
    document_code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_for_user(db, document_code, current_user)


@router.get("/{document_code}/pdf")
def download_fuel_coupon_pdf(
    document_code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    coupon = _get_for_user(db, document_code, current_user)
    content = generate_fuel_coupon_pdf(coupon)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="fuel-coupon-{coupon.document_code}.pdf"'},
    )


@router.delete("/{document_code}")
def delete_fuel_coupon(
    document_code: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MANAGER)),
):
    coupon = _get_for_user(db, document_code, current_user)
    details = {"document_code": coupon.document_code, "staff_name": coupon.staff_name}
    db.delete(coupon)
    commit_or_raise(db, "delete fuel coupon")
    logger.info("Fuel coupon %s deleted by %s", document_code, current_user.id)

    record_audit(db, current_user.id, "DELETE_FUEL_COUPON", "FUEL_COUPON", details, get_client_ip(request))
    return {"success": True, "message": "Fuel coupon deleted successfully"}
