from app.core.constants import (
    ADJUST_ADD,
    ADJUST_REMOVE,
    ADJUST_SET,
    ADJUSTMENT_TYPES,
    MAX_STOCK_QUANTITY,
)
from app.core.errors import InsufficientStock, InvalidAdjustment, InvalidAdjustmentType


def validate_adjustment(adjustment_type, adjustment_quantity):
    if adjustment_type not in ADJUSTMENT_TYPES:
        raise InvalidAdjustmentType(
            "Unknown adjustment type {!r}; expected one of: {}".format(
                adjustment_type, ", ".join(ADJUSTMENT_TYPES)
            )
        )
    if adjustment_quantity is None:
        raise InvalidAdjustment("Adjustment quantity is required.")
    if isinstance(adjustment_quantity, bool) or not isinstance(adjustment_quantity, int):
        raise InvalidAdjustment("Adjustment quantity must be a whole number.")
    if adjustment_quantity < 0:
        raise InvalidAdjustment("Adjustment quantity cannot be negative.")
    if adjustment_quantity > MAX_STOCK_QUANTITY:
        raise InvalidAdjustment(
            "Adjustment quantity cannot exceed {}.".format(MAX_STOCK_QUANTITY)
        )


def compute_adjustment(current_quantity, adjustment_type, adjustment_quantity):
    """Return the quantity an adjustment would leave on the shelf.

    ``set`` always succeeds once the input is valid; ``add`` fails only past
    ``MAX_STOCK_QUANTITY``. ``remove`` never clamps: taking more than is on
    hand raises ``InsufficientStock`` so the stock log only ever records
    deltas that really happened.
    """
    validate_adjustment(adjustment_type, adjustment_quantity)

    if adjustment_type == ADJUST_ADD:
        if current_quantity + adjustment_quantity > MAX_STOCK_QUANTITY:
            raise InvalidAdjustment(
                "Stock cannot exceed {} units.".format(MAX_STOCK_QUANTITY)
            )
        return current_quantity + adjustment_quantity
    if adjustment_type == ADJUST_REMOVE:
        if adjustment_quantity > current_quantity:
            raise InsufficientStock(available=current_quantity, requested=adjustment_quantity)
        return current_quantity - adjustment_quantity
    return adjustment_quantity


def preview_adjustment(current_quantity, adjustment_type, adjustment_quantity):
    """What the stock adjustment form shows before the user submits.

    Over-removal previews as zero with ``allowed`` False; submitting the
    same request through the ledger is rejected.
    """
    try:
        new_quantity = compute_adjustment(current_quantity, adjustment_type, adjustment_quantity)
    except InsufficientStock as exc:
        return {
            "current_quantity": current_quantity,
            "new_quantity": max(0, current_quantity - adjustment_quantity),
            "allowed": False,
            "error": str(exc),
        }
    except (InvalidAdjustment, InvalidAdjustmentType) as exc:
        return {
            "current_quantity": current_quantity,
            "new_quantity": current_quantity,
            "allowed": False,
            "error": str(exc),
        }
    return {
        "current_quantity": current_quantity,
        "new_quantity": new_quantity,
        "allowed": True,
        "error": None,
    }


__all__ = [
    "ADJUST_ADD",
    "ADJUST_REMOVE",
    "ADJUST_SET",
    "compute_adjustment",
    "preview_adjustment",
    "validate_adjustment",
]
