from decimal import Decimal

import pytest

from findules.exceptions import ValidationError
from findules.utils.money import format_amount, parse_decimal


def test_parse_keeps_decimal_precision():
    assert parse_decimal("0.1") + parse_decimal("0.2") == Decimal("0.3")
    assert parse_decimal(12) == Decimal("12")


def test_blank_uses_default_or_fails_when_required():
    assert parse_decimal("  ") == Decimal("0")
    with pytest.raises(ValidationError) as exc:
        parse_decimal(None, "amount_spent", default=None)
    assert exc.value.message == "amount_spent is required"


@pytest.mark.parametrize("value", ["12,5", "Infinity", True, "1e"])
def test_rejects_non_numbers(value):
    with pytest.raises(ValidationError):
        parse_decimal(value)


def test_format_amount():
    assert format_amount(Decimal("1234.5")) == "1234.50"
    assert format_amount(None) == ""


@pytest.mark.parametrize("value", ["50.004", "0.001", Decimal("12.345")])
def test_rejects_more_than_two_decimal_places(value):
    with pytest.raises(ValidationError) as exc:
        parse_decimal(value, "cash_at_hand")
    assert exc.value.message == "cash_at_hand cannot have more than 2 decimal places"


def test_trailing_zeros_beyond_cents_are_fine():
    assert parse_decimal("1.500") == Decimal("1.5")
