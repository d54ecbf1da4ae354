from .adjustments import adjust_stock, transfer_stock
from .movements import get_balance, purge_movement, record_movement, require_available

__all__ = [
    "adjust_stock",
    "transfer_stock",
    "get_balance",
    "purge_movement",
    "record_movement",
    "require_available",
]
