from typing import Optional

from fastapi import Header

from app.core.security import check_api_key
from app.database.session import get_db


def require_auth(
    api_key: Optional[str] = Header(None, alias="X-API-Key"),
    api_key_alt: Optional[str] = Header(None, alias="api-key"),
):
    """Guard for endpoints that change stock or registry data."""
    return check_api_key(api_key or api_key_alt)


__all__ = ["get_db", "require_auth"]
