# inventory/services/exceptions.py

"""
INVENTORY SERVICE ERRORS
"""

from core.services.amounts import format_quantity
from core.services.exceptions import (
    DomainValidationError,
    ERPServiceError,
    ReferentialError,
)


class InventoryError(ERPServiceError):
    """Base exception for inventory service failures."""


class StockValidationError(InventoryError, DomainValidationError):
    """Raised when a stock request is malformed (zero quantity, bad type...)."""


class StockReferenceError(InventoryError, ReferentialError):
    """Raised when an item or warehouse is missing or inactive."""


class InsufficientStockError(InventoryError):
    """
    Raised when a warehouse holds less of an item than a caller needs.

    Carries the item, warehouse, available and required amounts so callers
    can report them without re-querying.
    """

    def __init__(self, *, item, warehouse, available, required):
        self.item = item
        self.warehouse = warehouse
        self.available = available
        self.required = required

        name = getattr(item, "name", None) or str(item)
        super().__init__(
            f"Insufficient stock for {name}. "
            f"Available: {format_quantity(available)}, "
            f"Required: {format_quantity(required)}"
        )
