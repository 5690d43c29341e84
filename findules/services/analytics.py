"""Date-bucketed aggregation used by the analytics and dashboard views."""

from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window(today: date, months: int = 6) -> List[Tuple[int, int]]:
    """(year, month) pairs for the last ``months`` months, oldest first."""
    return [_shift_month(today.year, today.month, -offset) for offset in range(months - 1, -1, -1)]


def monthly_trends(
    records: Iterable[Any],
    date_of: Callable[[Any], Optional[date]],
    value_of: Callable[[Any], Any] = lambda _: 1,
    today: Optional[date] = None,
    months: int = 6,
) -> List[Dict[str, Any]]:
    """
    Sum ``value_of(record)`` per calendar month over the trailing window.

    Months without records still appear with a zero value so charts keep a
    fixed width.
    """
    today = today or date.today()
    buckets: "OrderedDict[Tuple[int, int], Decimal]" = OrderedDict(
        (key, Decimal("0")) for key in month_window(today, months)
    )
    for record in records:
        when = date_of(record)
        if when is None:
            continue
        if isinstance(when, datetime):
            when = when.date()
        key = (when.year, when.month)
        if key in buckets:
            buckets[key] += Decimal(str(value_of(record) or 0))

    return [
        {"name": MONTH_ABBR[month - 1], "year": year, "month": month, "value": value}
        for (year, month), value in buckets.items()
    ]


def distribution(rows: Iterable[Tuple[Any, Any]]) -> List[Dict[str, Any]]:
    """Turn ``(key, value)`` query rows into chart points, enum keys unwrapped."""
    points = []
    for key, value in rows:
        name = getattr(key, "value", key)
        points.append({"name": name, "value": value if value is not None else 0})
    return points


def percentage(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)
