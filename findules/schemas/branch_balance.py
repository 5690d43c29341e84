from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from findules.models import BalanceTransactionType


class BalanceTopUp(BaseModel):
    """Amount stays loosely typed so the ledger can report a clear error."""
    amount: Optional[Decimal] = None
    notes: Optional[str] = None


class BranchBalanceCreate(BalanceTopUp):
    branch_id: int


class BalanceTransactionRead(BaseModel):
    id: int
    transaction_type: BalanceTransactionType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    reference: Optional[str] = None
    performed_by: int
    performed_by_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BranchBalanceRead(BaseModel):
    id: int
    branch_id: int
    branch_name: Optional[str] = None
    branch_code: Optional[str] = None
    opening_balance: Decimal
    current_balance: Decimal
    total_issued: Decimal
    total_retired: Decimal
    last_updated: Optional[datetime] = None
    version: int

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BranchBalanceDetail(BaseModel):
    balance: BranchBalanceRead
    transactions: List[BalanceTransactionRead]
    pagination: Pagination
