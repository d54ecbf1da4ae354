# manufacturing/services/exceptions.py

"""
MANUFACTURING SERVICE ERRORS
"""

from core.services.exceptions import DomainValidationError, ERPServiceError


class ManufacturingError(ERPServiceError):
    """Base exception for BOM and production failures."""


class BOMValidationError(ManufacturingError, DomainValidationError):
    """Raised when a BOM definition is rejected."""


class BOMInUseError(ManufacturingError):
    """Raised when a BOM referenced by productions is deleted."""


class ProductionValidationError(ManufacturingError, DomainValidationError):
    """Raised when a production request is rejected before any write."""


class ProductionReversalError(ManufacturingError):
    """Raised when a production cannot be reversed."""
