from app.services.alert_service import get_alerts, scan_alerts
from app.services.dashboard_service import stock_summary
from app.services.ingestion_service import import_workbook
from app.services.stock_service import apply_adjustment, get_expiry_status, get_stock_status

__all__ = [
    "apply_adjustment",
    "get_alerts",
    "get_expiry_status",
    "get_stock_status",
    "import_workbook",
    "scan_alerts",
    "stock_summary",
]
