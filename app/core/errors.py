class StockControlError(Exception):
    """Base for stock control failures that are reported back to the caller."""

    status_code = 400


class InvalidAdjustment(StockControlError, ValueError):
    status_code = 400


class InvalidAdjustmentType(StockControlError, ValueError):
    status_code = 400


class InsufficientStock(StockControlError):
    status_code = 409

    def __init__(self, available, requested):
        self.available = available
        self.requested = requested
        super().__init__(
            "cannot remove more than current stock ({} available)".format(available)
        )


class MedicationNotFound(StockControlError, LookupError):
    status_code = 404

    def __init__(self, medication_id):
        self.medication_id = medication_id
        super().__init__("Medication {} not found.".format(medication_id))


class SupplierNotFound(StockControlError, LookupError):
    status_code = 404

    def __init__(self, supplier_id):
        self.supplier_id = supplier_id
        super().__init__("Supplier {} not found.".format(supplier_id))


class ConcurrentModification(StockControlError):
    status_code = 409

    def __init__(self, medication_id):
        self.medication_id = medication_id
        super().__init__(
            "Stock for medication {} changed while the adjustment was applied; "
            "reload and try again.".format(medication_id)
        )


__all__ = [
    "ConcurrentModification",
    "InsufficientStock",
    "InvalidAdjustment",
    "InvalidAdjustmentType",
    "MedicationNotFound",
    "StockControlError",
    "SupplierNotFound",
]
