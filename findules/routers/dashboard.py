from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from findules.database import get_db
from findules.models import AuditLog, FuelCoupon, Imprest, ImprestStatus, Reconciliation, User, VarianceCategory
from findules.schemas.audit import AuditLogRead
from findules.security import get_current_user, is_manager
from findules.services.imprest import overdue_cutoff
from findules.utils.dates import day_start

router = APIRouter()


@router.get("/stats")
def read_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Headline figures for the landing page. Non-managers see their branch only."""
    manager = is_manager(current_user)
    today = datetime.now(timezone.utc).date()
    week_start = day_start(today - timedelta(days=today.weekday()))

    def scoped(query, model):
        return query if manager else query.filter(model.branch_id == current_user.branch_id)

    # 1. Today's reconciliations
    reconciliations = scoped(db.query(Reconciliation), Reconciliation).filter(Reconciliation.date == today)
    reconciliations_today = reconciliations.count()
    variances = reconciliations.filter(Reconciliation.variance_category != VarianceCategory.NO_VARIANCE).count()

    # 2. This week's fuel coupons
    fuel_count, fuel_amount = scoped(
        db.query(func.count(FuelCoupon.id), func.coalesce(func.sum(FuelCoupon.estimated_amount), 0)),
        FuelCoupon,
    ).filter(FuelCoupon.date >= week_start).one()

    # 3. Open imprest; overdue is derived from the issue date
    open_imprest = scoped(db.query(Imprest), Imprest).filter(Imprest.status == ImprestStatus.ISSUED)
    outstanding = open_imprest.count()
    outstanding_amount = open_imprest.with_entities(func.coalesce(func.sum(Imprest.amount), 0)).scalar()
    overdue = open_imprest.filter(Imprest.date_issued < overdue_cutoff()).count()

    # 4. Recent activity
    activity = db.query(AuditLog)
    if not manager:
        activity = activity.filter(AuditLog.user_id == current_user.id)
    recent = activity.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(5).all()

    return {
        "reconciliations": {"today": reconciliations_today, "variances": variances},
        "fuel_coupons": {"this_week": fuel_count, "total_amount": Decimal(str(fuel_amount))},
        "imprest": {
            "outstanding": outstanding,
            "outstanding_amount": Decimal(str(outstanding_amount)),
            "overdue": overdue,
        },
        "recent_activity": [AuditLogRead.model_validate(entry) for entry in recent],
    }
