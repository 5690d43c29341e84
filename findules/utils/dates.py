from datetime import date, datetime, time, timedelta, timezone


def day_start(value: date) -> datetime:
    """Midnight UTC at the start of ``value``."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def day_end(value: date) -> datetime:
    """Exclusive upper bound covering the whole of ``value``."""
    return day_start(value + timedelta(days=1))
