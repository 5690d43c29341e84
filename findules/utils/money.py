from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, Optional

from findules.exceptions import ValidationError

ZERO = Decimal("0")
CENT = Decimal("0.01")


def parse_decimal(value: Any, field: str = "amount", default: Optional[Decimal] = ZERO) -> Decimal:
    """
    Convert user input to Decimal without going through float.

    ``None`` and empty strings fall back to ``default``; pass ``default=None``
    to make the field required.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(f"{field} is required", {"field": field})
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a valid number", {"field": field})
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be a valid number", {"field": field})
    if not result.is_finite():
        raise ValidationError(f"{field} must be a valid number", {"field": field})
    # Money is stored with two decimals; finer input would be rounded on save
    if result.as_tuple().exponent < -2:
        try:
            exact = result == result.quantize(CENT, rounding=ROUND_DOWN)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a valid number", {"field": field})
        if not exact:
            raise ValidationError(f"{field} cannot have more than 2 decimal places", {"field": field})
    return result


def format_amount(value: Any) -> str:
    """Two-decimal string without currency symbol, as used in exports."""
    if value is None:
        return ""
    return str(Decimal(str(value)).quantize(CENT))
