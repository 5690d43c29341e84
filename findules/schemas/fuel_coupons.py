from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from findules.models import FuelType


class FuelCouponCreate(BaseModel):
    staff_name: Optional[str] = None
    department: Optional[str] = None
    unit: Optional[str] = None
    vehicle_type: Optional[str] = None
    plate_number: Optional[str] = None
    purpose: Optional[str] = None
    fuel_type: Optional[FuelType] = None
    quantity_litres: Optional[Decimal] = None
    estimated_amount: Optional[Decimal] = None
    date: Optional[datetime] = None


class FuelCouponRead(BaseModel):
    id: int
    document_code: str
    date: datetime
    staff_name: str
    department: str
    unit: Optional[str] = None
    vehicle_type: Optional[str] = None
    plate_number: Optional[str] = None
    purpose: Optional[str] = None
    fuel_type: FuelType
    quantity_litres: Decimal
    estimated_amount: Optional[Decimal] = None
    created_by: int
    creator_name: Optional[str] = None
    branch_id: int
    branch_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
