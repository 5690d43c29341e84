# findules/models/fuel.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from findules.database import Base


class FuelType(str, enum.Enum):
    PETROL = "PETROL"
    DIESEL = "DIESEL"


class FuelCoupon(Base):
    __tablename__ = "fuel_coupons"

    id = Column(Integer, primary_key=True, index=True)
    document_code = Column(String, unique=True, index=True, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)

    staff_name = Column(String, nullable=False, index=True)
    department = Column(String, nullable=False)
    unit = Column(String, nullable=True)
    vehicle_type = Column(String, nullable=True)
    plate_number = Column(String, nullable=True, index=True)
    purpose = Column(String, nullable=True)

    fuel_type = Column(Enum(FuelType), nullable=False)
    quantity_litres = Column(Numeric(10, 2), nullable=False)
    estimated_amount = Column(Numeric(15, 2), default=0)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    creator = relationship("User")
    branch = relationship("Branch")

    @property
    def creator_name(self):
        return self.creator.name if self.creator else None

    @property
    def branch_name(self):
        return self.branch.branch_name if self.branch else None
