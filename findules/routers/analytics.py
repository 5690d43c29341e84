from collections import Counter
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from findules.database import get_db
from findules.models import (
    Branch, FuelCoupon, Imprest, ImprestStatus, Reconciliation, RecordStatus, User,
)
from findules.security import get_current_user, is_manager
from findules.services.analytics import distribution, monthly_trends, percentage
from findules.services.imprest import effective_status

router = APIRouter()


@router.get("/")
def read_analytics(
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Summary figures and chart series.

    Managers may narrow to one branch with ``branch_id``; everybody else is
    always limited to their own branch.
    """
    if not is_manager(current_user):
        branch_id = current_user.branch_id

    def scoped(query, model):
        return query.filter(model.branch_id == branch_id) if branch_id else query

    imprest = scoped(db.query(Imprest), Imprest).all()
    fuel_coupons = scoped(db.query(FuelCoupon), FuelCoupon).all()
    reconciliations = scoped(db.query(Reconciliation), Reconciliation).all()

    # --- SUMMARY ---
    total_issued = sum((i.amount for i in imprest), Decimal("0"))
    retired = sum(1 for i in imprest if i.status == ImprestStatus.RETIRED)
    active_staff = scoped(db.query(User), User).filter(User.status == RecordStatus.ACTIVE).count()
    branches = db.query(Branch).count()

    # --- DISTRIBUTIONS ---
    by_category = scoped(
        db.query(Imprest.category, func.sum(Imprest.amount)), Imprest
    ).group_by(Imprest.category).all()

    status_counts = Counter(effective_status(i.status, i.date_issued).value for i in imprest)

    branch_rows = db.query(
        Branch.branch_name,
        func.count(Imprest.id),
    ).outerjoin(
        Imprest, (Imprest.branch_id == Branch.id) & (Imprest.status == ImprestStatus.RETIRED)
    )
    if branch_id:
        branch_rows = branch_rows.filter(Branch.id == branch_id)
    branch_rows = branch_rows.group_by(Branch.id, Branch.branch_name).order_by(Branch.branch_name).all()

    by_fuel_type = scoped(
        db.query(FuelCoupon.fuel_type, func.sum(FuelCoupon.estimated_amount)), FuelCoupon
    ).group_by(FuelCoupon.fuel_type).all()

    by_variance = scoped(
        db.query(Reconciliation.variance_category, func.count(Reconciliation.id)), Reconciliation
    ).group_by(Reconciliation.variance_category).all()

    return {
        "summary": {
            "total_imprest_issued": total_issued,
            "active_staff": active_staff,
            "branches": branches,
            "retirement_rate": percentage(retired, len(imprest)),
        },
        "charts": {
            "imprest_distribution": distribution(by_category),
            "imprest_status": distribution(sorted(status_counts.items())),
            "branch_performance": distribution(branch_rows),
            "fuel_by_type": distribution(by_fuel_type),
            "variance_distribution": distribution(by_variance),
            "monthly_trends": monthly_trends(imprest, lambda i: i.date_issued, lambda i: i.amount),
            "fuel_trends": monthly_trends(fuel_coupons, lambda f: f.date, lambda f: f.estimated_amount),
            "reconciliation_trends": monthly_trends(reconciliations, lambda r: r.date),
        },
    }
