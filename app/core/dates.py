import math
from datetime import date, datetime, time

_SECONDS_PER_DAY = 24 * 60 * 60


def normalize_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value_text = value.strip()
        if not value_text:
            return None
        try:
            return date.fromisoformat(value_text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(value_text).date()
        except ValueError:
            return None
    return None


def days_between(start, end):
    """Whole days from ``start`` to ``end``, rounded up.

    Plain dates give an exact count. A datetime ``end`` with a time of day
    past midnight counts the partial day, so an expiry at 2024-01-02 08:00
    seen on 2024-01-01 is two days away, not one.
    """
    if start is None or end is None:
        return None
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end_naive = end.replace(tzinfo=None)
        delta = end_naive - datetime.combine(start, time.min)
        return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)
    return (end - start).days
