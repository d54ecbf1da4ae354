from .stock import (
    StockAdjustmentCommandSerializer,
    StockBalanceSerializer,
    StockMovementSerializer,
    StockTransferCommandSerializer,
)

__all__ = [
    "StockAdjustmentCommandSerializer",
    "StockBalanceSerializer",
    "StockMovementSerializer",
    "StockTransferCommandSerializer",
]
