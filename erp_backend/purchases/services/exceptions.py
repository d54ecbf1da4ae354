# purchases/services/exceptions.py

from core.services.exceptions import DomainValidationError, ERPServiceError


class PurchaseError(ERPServiceError):
    """Base exception for purchase service failures."""


class PurchaseValidationError(PurchaseError, DomainValidationError):
    """Raised when a purchase request is rejected before any write."""


class PurchaseReversalError(PurchaseError):
    """Raised when a purchase cannot be reversed."""
