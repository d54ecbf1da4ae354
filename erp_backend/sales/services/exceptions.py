# sales/services/exceptions.py

from core.services.exceptions import DomainValidationError, ERPServiceError


class SaleError(ERPServiceError):
    """Base exception for sale service failures."""


class SaleValidationError(SaleError, DomainValidationError):
    """Raised when a sale request is rejected before any write."""


class SaleReversalError(SaleError):
    """Raised when a sale cannot be reversed."""
