from app.routers.alerts import router as alerts_router
from app.routers.dashboard import router as dashboard_router
from app.routers.health import router as health_router
from app.routers.ingest import router as ingest_router
from app.routers.medications import router as medications_router
from app.routers.stock_log import router as stock_log_router
from app.routers.suppliers import router as suppliers_router

__all__ = [
    "alerts_router",
    "dashboard_router",
    "health_router",
    "ingest_router",
    "medications_router",
    "stock_log_router",
    "suppliers_router",
]
