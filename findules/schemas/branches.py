from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from findules.models import RecordStatus


class BranchBase(BaseModel):
    branch_code: str = Field(..., min_length=1)
    branch_name: str = Field(..., min_length=1)
    location: Optional[str] = None


class BranchCreate(BranchBase):
    pass


class BranchRead(BranchBase):
    id: int
    status: RecordStatus
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CashierCreate(BaseModel):
    name: str = Field(..., min_length=1)
    branch_id: int


class CashierRead(CashierCreate):
    id: int
    status: RecordStatus
    branch_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
