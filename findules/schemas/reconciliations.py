from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from findules.models import ReconciliationStatus, VarianceCategory


class ReconciliationCreate(BaseModel):
    date: date_type
    cashier_id: int

    # Missing figures count as zero
    actual_opening_balance: Optional[Decimal] = None
    total_sales: Optional[Decimal] = None
    pos_transactions_amount: Optional[Decimal] = None
    cash_transaction: Optional[Decimal] = None
    transfers_in: Optional[Decimal] = None
    transfers_out: Optional[Decimal] = None
    discounts_given: Optional[Decimal] = None
    refunds_issued: Optional[Decimal] = None
    cash_withdrawn: Optional[Decimal] = None
    cash_at_hand: Optional[Decimal] = None

    withdrawal_recipient: Optional[str] = None
    withdrawal_details: Optional[str] = None
    teller_no: Optional[str] = None
    bank_name: Optional[str] = None
    branch_location: Optional[str] = None
    deposit_slip_no: Optional[str] = None
    deposit_slip_upload: Optional[str] = None
    remarks: Optional[str] = None


class ReconciliationRead(BaseModel):
    id: int
    serial_number: str
    date: date_type
    cashier_id: int
    cashier_name: str
    branch_id: int
    branch_name: Optional[str] = None

    actual_opening_balance: Decimal
    actual_total_sales: Decimal
    pos_transactions_amount: Decimal
    cash_transaction: Decimal
    transfers_in: Decimal
    transfers_out: Decimal
    discounts_given: Decimal
    refunds_issued: Decimal
    cash_withdrawn: Decimal
    actual_closing_balance: Decimal

    withdrawal_recipient: Optional[str] = None
    withdrawal_details: Optional[str] = None
    teller_no: Optional[str] = None
    bank_name: Optional[str] = None
    branch_location: Optional[str] = None
    deposit_slip_no: Optional[str] = None
    deposit_slip_upload: Optional[str] = None

    turn_over: Decimal
    expected_closing_balance: Decimal
    overage_shortage: Decimal
    variance_category: VarianceCategory

    remarks: Optional[str] = None
    status: ReconciliationStatus
    submitted_by: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PreviousBalance(BaseModel):
    has_history: bool
    previous_closing_balance: Optional[Decimal] = None
    previous_date: Optional[date_type] = None
    previous_serial_number: Optional[str] = None
    message: Optional[str] = None
