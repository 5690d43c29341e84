from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from findules.models import ImprestCategory, ImprestStatus
from findules.services.imprest import effective_status


class ImprestCreate(BaseModel):
    # Presence is checked by the issuance rules so every missing field is reported at once
    staff_name: Optional[str] = None
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    purpose: Optional[str] = None
    date_issued: Optional[datetime] = None


class ImprestRetire(BaseModel):
    amount_spent: Optional[Decimal] = None
    date_retired: Optional[datetime] = None
    receipts: Optional[str] = None
    retirement_notes: Optional[str] = None


class ImprestRead(BaseModel):
    id: int
    imprest_no: str
    staff_name: str
    amount: Decimal
    category: ImprestCategory
    purpose: str
    date_issued: datetime
    status: ImprestStatus

    date_retired: Optional[datetime] = None
    amount_spent: Optional[Decimal] = None
    balance: Optional[Decimal] = None
    receipts: Optional[str] = None
    retirement_notes: Optional[str] = None

    issued_by: int
    issuer_name: Optional[str] = None
    retired_by: Optional[int] = None
    retirer_name: Optional[str] = None
    branch_id: int
    branch_name: Optional[str] = None

    # Derived on every read, never stored
    effective_status: Optional[ImprestStatus] = None
    is_overdue: bool = False

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def derive_overdue(self):
        self.effective_status = effective_status(self.status, self.date_issued)
        self.is_overdue = self.effective_status == ImprestStatus.OVERDUE
        return self
