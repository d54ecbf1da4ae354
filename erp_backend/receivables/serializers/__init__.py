from .customer import CustomerCommandSerializer, CustomerLedgerEntrySerializer, CustomerSerializer
from .invoice import InvoiceCommandSerializer, InvoiceLineInputSerializer, InvoiceSerializer
from .payment import (
    PaymentAllocationInputSerializer,
    PaymentCommandSerializer,
    PaymentSerializer,
)

__all__ = [
    "CustomerCommandSerializer",
    "CustomerLedgerEntrySerializer",
    "CustomerSerializer",
    "InvoiceCommandSerializer",
    "InvoiceLineInputSerializer",
    "InvoiceSerializer",
    "PaymentAllocationInputSerializer",
    "PaymentCommandSerializer",
    "PaymentSerializer",
]
