from app.core.constants import IN_STOCK, LOW_STOCK, OUT_OF_STOCK


def classify_stock(quantity, min_stock_level):
    # Negative quantities cannot reach here; the ledger rejects them.
    if quantity == 0:
        return OUT_OF_STOCK
    if quantity <= min_stock_level:
        return LOW_STOCK
    return IN_STOCK
