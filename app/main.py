import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import Settings, get_settings
from app.core.logging import setup_logging
from app.database import Base, engine, ensure_sqlite_schema
from app.models import import_all_models
from app.routers import (
    alerts_router,
    dashboard_router,
    health_router,
    ingest_router,
    medications_router,
    stock_log_router,
    suppliers_router,
)

logger = logging.getLogger(__name__)

setup_logging()
settings: Settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import_all_models()
    Base.metadata.create_all(bind=engine)
    added = ensure_sqlite_schema()
    logger.info("%s started (%s), %s columns migrated", settings.APP_NAME, settings.ENVIRONMENT, len(added))
    yield
    logger.info("%s shutting down", settings.APP_NAME)


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(medications_router)
app.include_router(stock_log_router)
app.include_router(alerts_router)
app.include_router(suppliers_router)
app.include_router(dashboard_router)
app.include_router(ingest_router)


__all__ = ["app"]
