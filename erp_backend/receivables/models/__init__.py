"""
PATH: receivables/models/__init__.py

Accounts-receivable models export surface.
"""

from .customer import Customer
from .invoice import Invoice, InvoiceItem
from .ledger import CustomerLedgerEntry
from .payment import Payment, PaymentAllocation

__all__ = [
    "Customer",
    "CustomerLedgerEntry",
    "Invoice",
    "InvoiceItem",
    "Payment",
    "PaymentAllocation",
]
