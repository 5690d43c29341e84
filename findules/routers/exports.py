from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from findules.database import get_db
from findules.models import FuelType, ImprestStatus, User
from findules.routers.fuel_coupons import fuel_coupon_query
from findules.routers.imprest import imprest_query
from findules.routers.reconciliations import reconciliation_query
from findules.security import get_current_user
from findules.services.imprest import effective_status
from findules.utils.exports import export_response, format_date
from findules.utils.money import format_amount

router = APIRouter()

IMPREST_COLUMNS = (
    "Imprest No", "Staff Name", "Amount", "Category", "Purpose", "Date Issued", "Status",
    "Date Retired", "Amount Spent", "Balance", "Issued By", "Retired By", "Branch",
)
RECONCILIATION_COLUMNS = (
    "Serial Number", "Date", "Cashier", "Branch", "Opening Balance", "Total Sales", "POS Transactions",
    "Turn Over", "Expected Closing", "Cash at Hand", "Variance", "Variance Category", "Status",
)
FUEL_COUPON_COLUMNS = (
    "Document Code", "Date", "Staff Name", "Department", "Unit", "Vehicle Type", "Plate Number",
    "Fuel Type", "Quantity (Litres)", "Estimated Amount", "Purpose", "Created By", "Branch",
)


@router.get("/imprest")
def export_imprest(
    format: str = Query("csv"),
    status: Optional[ImprestStatus] = None,
    staff_name: Optional[str] = None,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = [
        {
            "Imprest No": i.imprest_no,
            "Staff Name": i.staff_name,
            "Amount": format_amount(i.amount),
            "Category": i.category.value,
            "Purpose": i.purpose,
            "Date Issued": format_date(i.date_issued),
            "Status": effective_status(i.status, i.date_issued).value,
            "Date Retired": format_date(i.date_retired),
            "Amount Spent": format_amount(i.amount_spent),
            "Balance": format_amount(i.balance),
            "Issued By": i.issuer_name or "",
            "Retired By": i.retirer_name or "",
            "Branch": i.branch_name or "",
        }
        for i in imprest_query(db, current_user, status, staff_name, start_date, end_date)
    ]
    return export_response(rows, IMPREST_COLUMNS, "imprest", format, sheet_name="Imprest")


@router.get("/reconciliations")
def export_reconciliations(
    format: str = Query("csv"),
    date: Optional[date_type] = None,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = [
        {
            "Serial Number": r.serial_number,
            "Date": format_date(r.date),
            "Cashier": r.cashier_name,
            "Branch": r.branch_name or "",
            "Opening Balance": format_amount(r.actual_opening_balance),
            "Total Sales": format_amount(r.actual_total_sales),
            "POS Transactions": format_amount(r.pos_transactions_amount),
            "Turn Over": format_amount(r.turn_over),
            "Expected Closing": format_amount(r.expected_closing_balance),
            "Cash at Hand": format_amount(r.actual_closing_balance),
            "Variance": format_amount(r.overage_shortage),
            "Variance Category": r.variance_category.value,
            "Status": r.status.value,
        }
        for r in reconciliation_query(db, current_user, date, branch_id)
    ]
    return export_response(rows, RECONCILIATION_COLUMNS, "reconciliations", format, sheet_name="Reconciliations")


@router.get("/fuel-coupons")
def export_fuel_coupons(
    format: str = Query("csv"),
    fuel_type: Optional[FuelType] = None,
    staff_name: Optional[str] = None,
    plate_number: Optional[str] = None,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = [
        {
            "Document Code": fc.document_code,
            "Date": format_date(fc.date),
            "Staff Name": fc.staff_name,
            "Department": fc.department,
            "Unit": fc.unit or "",
            "Vehicle Type": fc.vehicle_type or "",
            "Plate Number": fc.plate_number or "",
            "Fuel Type": fc.fuel_type.value,
            "Quantity (Litres)": format_amount(fc.quantity_litres),
            "Estimated Amount": format_amount(fc.estimated_amount),
            "Purpose": fc.purpose or "",
            "Created By": fc.creator_name or "",
            "Branch": fc.branch_name or "",
        }
        for fc in fuel_coupon_query(db, current_user, fuel_type, staff_name, plate_number, start_date, end_date)
    ]
    return export_response(rows, FUEL_COUPON_COLUMNS, "fuel_coupons", format, sheet_name="Fuel Coupons")
