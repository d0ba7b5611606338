from app.database.base import Base
from app.database.engine import create_app_engine, engine, ensure_sqlite_schema
from app.database.session import SessionLocal, get_db, session_scope

__all__ = [
    "Base",
    "SessionLocal",
    "create_app_engine",
    "engine",
    "ensure_sqlite_schema",
    "get_db",
    "session_scope",
]
