import importlib

from app.models.medication import Medication
from app.models.stock_log import StockLogEntry
from app.models.supplier import MedicationSupplier


def import_all_models() -> None:
    for module_name in (
        "app.models.medication",
        "app.models.stock_log",
        "app.models.supplier",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Medication",
    "MedicationSupplier",
    "StockLogEntry",
    "import_all_models",
]
