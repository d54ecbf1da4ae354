# receivables/services/exceptions.py

"""
RECEIVABLES SERVICE ERRORS

Centralized domain errors for customer, invoice and payment services.
"""

from core.services.exceptions import (
    DomainValidationError,
    ERPServiceError,
    ReferentialError,
)


class ReceivablesError(ERPServiceError):
    """Base exception for all receivables service failures."""


class ReceivablesValidationError(ReceivablesError, DomainValidationError):
    """Raised when a customer, invoice or payment request is malformed."""


class AllocationMismatchError(ReceivablesValidationError):
    """Raised when payment allocations do not add up to the payment amount."""


class InvoiceOwnershipError(ReceivablesError, ReferentialError):
    """Raised when an allocated invoice is missing or belongs to another customer."""


class InvoiceStateError(ReceivablesError):
    """Raised when an invoice's status does not allow the operation."""


class CustomerInUseError(ReceivablesError):
    """Raised when a customer with invoices or payments is deleted."""
