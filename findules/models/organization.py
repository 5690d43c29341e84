# findules/models/organization.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from findules.database import Base


class RecordStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    branch_code = Column(String, unique=True, index=True, nullable=False)
    branch_name = Column(String, index=True, nullable=False)
    location = Column(String, nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship("User", back_populates="branch")
    cashiers = relationship("Cashier", back_populates="branch")
    balance = relationship("BranchBalance", back_populates="branch", uselist=False)


class Cashier(Base):
    """Till operator. Cashiers never log in; staff reconcile on their behalf."""

    __tablename__ = "cashiers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    branch = relationship("Branch", back_populates="cashiers")

    @property
    def branch_name(self):
        return self.branch.branch_name if self.branch else None
