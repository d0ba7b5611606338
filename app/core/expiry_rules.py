from datetime import date, datetime

from app.core.constants import DEFAULT_EXPIRY_WINDOW_DAYS, EXPIRED, EXPIRING_SOON, VALID
from app.core.dates import days_between, normalize_date


def _coerce_expiry(value):
    if value is None or isinstance(value, (date, datetime)):
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
            return datetime.fromisoformat(value_text)
        except ValueError:
            return None
    return None


def days_until_expiry(expiry_date, today):
    expiry = _coerce_expiry(expiry_date)
    today = normalize_date(today)
    if expiry is None or today is None:
        return None
    return days_between(today, expiry)


def classify_expiry(expiry_date, today, window_days=DEFAULT_EXPIRY_WINDOW_DAYS):
    days = days_until_expiry(expiry_date, today)
    if days is None:
        return None
    if days < 0:
        return EXPIRED
    if days <= window_days:
        return EXPIRING_SOON
    return VALID
