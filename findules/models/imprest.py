# findules/models/imprest.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from findules.database import Base


class ImprestStatus(str, enum.Enum):
    ISSUED = "ISSUED"
    RETIRED = "RETIRED"
    # Never stored by the API; derived from date_issued at read time
    OVERDUE = "OVERDUE"


class ImprestCategory(str, enum.Enum):
    TRANSPORT = "TRANSPORT"
    MEALS = "MEALS"
    SUPPLIES = "SUPPLIES"
    OTHER = "OTHER"


class Imprest(Base):
    __tablename__ = "imprest"

    id = Column(Integer, primary_key=True, index=True)
    imprest_no = Column(String, unique=True, index=True, nullable=False)

    staff_name = Column(String, nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    category = Column(Enum(ImprestCategory), nullable=False)
    purpose = Column(String, nullable=False)
    date_issued = Column(DateTime(timezone=True), nullable=False)
    status = Column(Enum(ImprestStatus), default=ImprestStatus.ISSUED, nullable=False)

    # Retirement
    date_retired = Column(DateTime(timezone=True), nullable=True)
    amount_spent = Column(Numeric(15, 2), nullable=True)
    balance = Column(Numeric(15, 2), nullable=True)
    receipts = Column(Text, nullable=True)
    retirement_notes = Column(Text, nullable=True)

    issued_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    retired_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    version = Column(Integer, nullable=False)

    issuer = relationship("User", foreign_keys=[issued_by])
    retirer = relationship("User", foreign_keys=[retired_by])
    branch = relationship("Branch")

    __mapper_args__ = {"version_id_col": version}

    @property
    def issuer_name(self):
        return self.issuer.name if self.issuer else None

    @property
    def retirer_name(self):
        return self.retirer.name if self.retirer else None

    @property
    def branch_name(self):
        return self.branch.branch_name if self.branch else None
