# core/services/exceptions.py

"""
ERP SERVICE ERRORS

Shared roots of the domain error taxonomy.
Each app subclasses these in its own services/exceptions.py.
"""


class ERPServiceError(Exception):
    """Base exception for all service-layer failures."""


class DomainValidationError(ERPServiceError):
    """Raised when a request is rejected before any write."""


class InvalidAmountError(DomainValidationError):
    """Raised when a quantity or money value cannot be parsed."""


class ReferentialError(ERPServiceError):
    """Raised when a referenced record is missing or belongs elsewhere."""
