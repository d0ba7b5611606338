# Adjustment types accepted by the ledger.
ADJUST_ADD = "add"
ADJUST_REMOVE = "remove"
ADJUST_SET = "set"
ADJUSTMENT_TYPES = (ADJUST_ADD, ADJUST_REMOVE, ADJUST_SET)

# Largest quantity a stock record may hold (signed 32-bit column range).
MAX_STOCK_QUANTITY = 2**31 - 1

# Stock status, derived from quantity vs. min_stock_level.
OUT_OF_STOCK = "outOfStock"
LOW_STOCK = "lowStock"
IN_STOCK = "inStock"
STOCK_STATUSES = (OUT_OF_STOCK, LOW_STOCK, IN_STOCK)

# Expiry status, derived from expiry_date vs. the as-of date.
EXPIRED = "expired"
EXPIRING_SOON = "expiringSoon"
VALID = "valid"

DEFAULT_EXPIRY_WINDOW_DAYS = 30
INITIAL_STOCK_REASON = "Initial stock"
