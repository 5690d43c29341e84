# findules/models/balances.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from findules.database import Base


class BalanceTransactionType(str, enum.Enum):
    OPENING_BALANCE = "OPENING_BALANCE"
    TOP_UP = "TOP_UP"
    IMPREST_ISSUED = "IMPREST_ISSUED"
    IMPREST_RETIRED = "IMPREST_RETIRED"
    IMPREST_REVERSED = "IMPREST_REVERSED"


class BranchBalance(Base):
    """Cash float held by a branch. One row per branch."""

    __tablename__ = "branch_balances"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), unique=True, nullable=False)

    opening_balance = Column(Numeric(15, 2), nullable=False, default=0)
    current_balance = Column(Numeric(15, 2), nullable=False, default=0)
    total_issued = Column(Numeric(15, 2), nullable=False, default=0)
    total_retired = Column(Numeric(15, 2), nullable=False, default=0)

    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Bumped on every UPDATE; a stale writer gets StaleDataError
    version = Column(Integer, nullable=False)

    branch = relationship("Branch", back_populates="balance")
    transactions = relationship(
        "BranchBalanceTransaction",
        back_populates="branch_balance",
        order_by="BranchBalanceTransaction.id.desc()",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def branch_name(self):
        return self.branch.branch_name if self.branch else None

    @property
    def branch_code(self):
        return self.branch.branch_code if self.branch else None


class BranchBalanceTransaction(Base):
    """
    Append-only ledger row. ``amount`` is signed (issuance is negative) so
    that balance_after == balance_before + amount holds for every type.
    """

    __tablename__ = "branch_balance_transactions"

    id = Column(Integer, primary_key=True, index=True)
    branch_balance_id = Column(Integer, ForeignKey("branch_balances.id"), nullable=False, index=True)

    transaction_type = Column(Enum(BalanceTransactionType), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    balance_before = Column(Numeric(15, 2), nullable=False)
    balance_after = Column(Numeric(15, 2), nullable=False)

    reference = Column(String, nullable=True)  # imprest number, when applicable
    performed_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    branch_balance = relationship("BranchBalance", back_populates="transactions")
    user = relationship("User")

    @property
    def performed_by_name(self):
        return self.user.name if self.user else None
