# receivables/services/customer_service.py

from __future__ import annotations

import logging

from django.db import transaction

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import ZERO_MONEY, to_money
from core.services.exceptions import InvalidAmountError
from core.services.numbering import PREFIX_CUSTOMER, next_sequence_code
from receivables.models import Customer, CustomerLedgerEntry
from receivables.services.exceptions import CustomerInUseError, ReceivablesValidationError
from receivables.services.ledger_service import (
    create_ledger_entry,
    recalculate_customer_balance,
)

logger = logging.getLogger("receivables")

CUSTOMER_EDITABLE_FIELDS = {
    "name",
    "contact_person",
    "email",
    "phone",
    "billing_address",
    "shipping_address",
    "payment_terms_days",
    "credit_limit",
    "is_active",
}


def _money_field(value, field: str):
    try:
        return to_money(value, field=field)
    except InvalidAmountError as exc:
        raise ReceivablesValidationError(str(exc)) from exc


def _terms_days(value) -> int:
    if isinstance(value, bool):
        raise ReceivablesValidationError("payment_terms_days must be a whole number")
    try:
        days = int(value)
    except (TypeError, ValueError) as exc:
        raise ReceivablesValidationError("payment_terms_days must be a whole number") from exc
    if days < 0:
        raise ReceivablesValidationError("payment_terms_days cannot be negative")
    return days


@transaction.atomic
def create_customer(
    *,
    name: str,
    contact_person: str = "",
    email: str = "",
    phone: str = "",
    billing_address: str = "",
    shipping_address: str = "",
    payment_terms_days=Customer.DEFAULT_PAYMENT_TERMS_DAYS,
    credit_limit=0,
    opening_balance=0,
    opening_date=None,
    user=None,
) -> Customer:
    """
    CREATE CUSTOMER (atomic)

    - customer_code = CUST<NNN>
    - a non-zero opening balance is written to the ledger as
      OPENING_BALANCE (debit when positive, credit when negative)
    """
    name = (name or "").strip()
    if not name:
        raise ReceivablesValidationError("Customer name is required")

    credit_limit = _money_field(credit_limit, "credit_limit")
    if credit_limit < 0:
        raise ReceivablesValidationError("credit_limit cannot be negative")
    opening_balance = _money_field(opening_balance, "opening_balance")

    customer = Customer.objects.create(
        customer_code=next_sequence_code(PREFIX_CUSTOMER),
        name=name,
        contact_person=contact_person or "",
        email=(email or "").strip(),
        phone=phone or "",
        billing_address=billing_address or "",
        shipping_address=shipping_address or "",
        payment_terms_days=_terms_days(payment_terms_days),
        credit_limit=credit_limit,
        opening_balance=opening_balance,
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    if opening_balance != ZERO_MONEY:
        create_ledger_entry(
            customer=customer,
            transaction_type=CustomerLedgerEntry.OPENING_BALANCE,
            reference_no=f"OPEN-{customer.customer_code}",
            debit=opening_balance if opening_balance > 0 else ZERO_MONEY,
            credit=-opening_balance if opening_balance < 0 else ZERO_MONEY,
            description="Opening balance",
            transaction_date=opening_date,
        )

    recalculate_customer_balance(customer)

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type="Customer",
        entity_id=customer.customer_code,
        description=f"Created customer {customer.customer_code} ({customer.name})",
    )
    logger.info(
        "Customer created",
        extra={
            "customer_code": customer.customer_code,
            "opening_balance": str(opening_balance),
        },
    )
    return customer


@transaction.atomic
def update_customer(customer: Customer, *, user=None, **fields) -> Customer:
    unknown = set(fields) - CUSTOMER_EDITABLE_FIELDS
    if unknown:
        raise ReceivablesValidationError(
            f"Cannot update customer fields: {', '.join(sorted(unknown))}"
        )

    if "name" in fields:
        fields["name"] = (fields["name"] or "").strip()
        if not fields["name"]:
            raise ReceivablesValidationError("Customer name is required")
    if "credit_limit" in fields:
        fields["credit_limit"] = _money_field(fields["credit_limit"], "credit_limit")
        if fields["credit_limit"] < 0:
            raise ReceivablesValidationError("credit_limit cannot be negative")
    if "payment_terms_days" in fields:
        fields["payment_terms_days"] = _terms_days(fields["payment_terms_days"])

    locked = Customer.objects.select_for_update().get(pk=customer.pk)
    for key, value in fields.items():
        setattr(locked, key, value)
    locked.save(update_fields=[*fields.keys(), "updated_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="Customer",
        entity_id=locked.customer_code,
        description=f"Updated customer {locked.customer_code}: {', '.join(sorted(fields))}",
    )
    return locked


@transaction.atomic
def deactivate_customer(customer: Customer, *, user=None) -> Customer:
    """
    Soft-delete a customer. Rejected once the customer has any invoice or
    payment on file.
    """
    if customer.invoices.exists() or customer.payments.exists():
        raise CustomerInUseError(
            f"Cannot delete customer {customer.customer_code}: invoices or payments exist"
        )

    locked = Customer.objects.select_for_update().get(pk=customer.pk)
    locked.is_active = False
    locked.save(update_fields=["is_active", "updated_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type="Customer",
        entity_id=locked.customer_code,
        description=f"Deactivated customer {locked.customer_code}",
    )
    return locked
