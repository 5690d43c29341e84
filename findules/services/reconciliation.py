"""
Daily cashier reconciliation.

    turn_over                = opening balance + total sales
    expected_closing_balance = turn_over - POS - transfers in - transfers out
                               - discounts - refunds - cash withdrawn
    overage_shortage         = cash at hand - expected_closing_balance

``cash_transaction`` is captured for the record but is not part of the
deduction chain.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from findules.models.reconciliations import VarianceCategory
from findules.utils.money import ZERO, parse_decimal

# Variance thresholds, in currency units
MINOR_VARIANCE_LIMIT = Decimal("50")
MAJOR_VARIANCE_LIMIT = Decimal("200")

INPUT_FIELDS = (
    "actual_opening_balance",
    "total_sales",
    "pos_transactions_amount",
    "cash_transaction",
    "transfers_in",
    "transfers_out",
    "discounts_given",
    "refunds_issued",
    "cash_withdrawn",
    "cash_at_hand",
)


@dataclass(frozen=True)
class ReconciliationInput:
    actual_opening_balance: Decimal = ZERO
    total_sales: Decimal = ZERO
    pos_transactions_amount: Decimal = ZERO
    cash_transaction: Decimal = ZERO
    transfers_in: Decimal = ZERO
    transfers_out: Decimal = ZERO
    discounts_given: Decimal = ZERO
    refunds_issued: Decimal = ZERO
    cash_withdrawn: Decimal = ZERO
    cash_at_hand: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ReconciliationInput":
        """Build from loosely typed input; missing or blank figures count as 0."""
        return cls(**{name: parse_decimal(data.get(name), name) for name in INPUT_FIELDS})


@dataclass(frozen=True)
class ReconciliationFigures:
    turn_over: Decimal
    expected_closing_balance: Decimal
    overage_shortage: Decimal
    variance_category: VarianceCategory


def classify_variance(variance: Any) -> VarianceCategory:
    variance = parse_decimal(variance, "variance")
    magnitude = abs(variance)

    if magnitude == 0:
        return VarianceCategory.NO_VARIANCE
    shortage = variance < 0
    if magnitude <= MINOR_VARIANCE_LIMIT:
        return VarianceCategory.MINOR_SHORTAGE if shortage else VarianceCategory.MINOR_OVERAGE
    if magnitude <= MAJOR_VARIANCE_LIMIT:
        return VarianceCategory.MAJOR_SHORTAGE if shortage else VarianceCategory.MAJOR_OVERAGE
    return VarianceCategory.CRITICAL_SHORTAGE if shortage else VarianceCategory.CRITICAL_OVERAGE


def compute_reconciliation(data: ReconciliationInput) -> ReconciliationFigures:
    turn_over = data.actual_opening_balance + data.total_sales

    expected_closing_balance = (
        turn_over
        - data.pos_transactions_amount
        - data.transfers_in
        - data.transfers_out
        - data.discounts_given
        - data.refunds_issued
        - data.cash_withdrawn
    )

    overage_shortage = data.cash_at_hand - expected_closing_balance

    return ReconciliationFigures(
        turn_over=turn_over,
        expected_closing_balance=expected_closing_balance,
        overage_shortage=overage_shortage,
        variance_category=classify_variance(overage_shortage),
    )
