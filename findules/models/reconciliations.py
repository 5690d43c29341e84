# findules/models/reconciliations.py
import enum
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from findules.database import Base


class VarianceCategory(str, enum.Enum):
    NO_VARIANCE = "NO_VARIANCE"
    MINOR_SHORTAGE = "MINOR_SHORTAGE"
    MINOR_OVERAGE = "MINOR_OVERAGE"
    MAJOR_SHORTAGE = "MAJOR_SHORTAGE"
    MAJOR_OVERAGE = "MAJOR_OVERAGE"
    CRITICAL_SHORTAGE = "CRITICAL_SHORTAGE"
    CRITICAL_OVERAGE = "CRITICAL_OVERAGE"


class ReconciliationStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RETIRED = "RETIRED"


class Reconciliation(Base):
    __tablename__ = "reconciliations"
    __table_args__ = (
        UniqueConstraint("cashier_id", "date", name="uq_reconciliations_cashier_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    serial_number = Column(String, unique=True, index=True, nullable=False)
    date = Column(Date, nullable=False, index=True)

    cashier_id = Column(Integer, ForeignKey("cashiers.id"), nullable=False)
    cashier_name = Column(String, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)

    # Cashier's submitted figures
    actual_opening_balance = Column(Numeric(15, 2), default=0)
    actual_total_sales = Column(Numeric(15, 2), default=0)
    pos_transactions_amount = Column(Numeric(15, 2), default=0)
    cash_transaction = Column(Numeric(15, 2), default=0)  # informational only
    transfers_in = Column(Numeric(15, 2), default=0)
    transfers_out = Column(Numeric(15, 2), default=0)
    discounts_given = Column(Numeric(15, 2), default=0)
    refunds_issued = Column(Numeric(15, 2), default=0)
    cash_withdrawn = Column(Numeric(15, 2), default=0)
    actual_closing_balance = Column(Numeric(15, 2), default=0)  # physical count

    # Withdrawal / bank deposit details
    withdrawal_recipient = Column(String, nullable=True)
    withdrawal_details = Column(String, nullable=True)
    teller_no = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    branch_location = Column(String, nullable=True)
    deposit_slip_no = Column(String, nullable=True)
    deposit_slip_upload = Column(String, nullable=True)

    # Derived once at creation, never recomputed
    turn_over = Column(Numeric(15, 2), nullable=False)
    expected_closing_balance = Column(Numeric(15, 2), nullable=False)
    overage_shortage = Column(Numeric(15, 2), nullable=False)
    variance_category = Column(Enum(VarianceCategory), nullable=False)

    remarks = Column(String, nullable=True)
    status = Column(Enum(ReconciliationStatus), default=ReconciliationStatus.ACTIVE, nullable=False)

    submitted_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_by_ip = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cashier = relationship("Cashier")
    branch = relationship("Branch")
    submitter = relationship("User")

    @property
    def branch_name(self):
        return self.branch.branch_name if self.branch else None
