import hmac
from typing import Optional

from fastapi import HTTPException, status

from app.config import get_settings


def load_api_keys() -> set[str]:
    settings = get_settings()
    keys = set()
    if settings.ADMIN_API_KEY:
        keys.add(settings.ADMIN_API_KEY.strip())
    if settings.API_KEYS:
        for value in settings.API_KEYS.split(","):
            value = value.strip()
            if value:
                keys.add(value)
    return keys


def check_api_key(api_key: Optional[str]) -> bool:
    """Gate for stock and registry writes.

    Returns False when no keys are configured (local use, the service runs
    open) and True for a matching key. A missing or wrong key is a 401 once
    any key is configured.
    """
    keys = load_api_keys()
    if not keys:
        return False
    if api_key and any(hmac.compare_digest(api_key.strip(), key) for key in keys):
        return True
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API key",
    )
