"""
MIGRATION: RECEIVABLES INITIAL

Creates the accounts-receivable side: customers, invoices (+ lines),
payments, payment allocations and the append-only customer ledger.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


def _id():
    return models.BigAutoField(
        auto_created=True,
        primary_key=True,
        serialize=False,
        verbose_name="ID",
    )


def _money(**kwargs):
    return models.DecimalField(decimal_places=2, max_digits=14, **kwargs)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", _id()),
                (
                    "customer_code",
                    models.CharField(editable=False, max_length=16, unique=True),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "contact_person",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("billing_address", models.TextField(blank=True, default="")),
                ("shipping_address", models.TextField(blank=True, default="")),
                ("payment_terms_days", models.PositiveIntegerField(default=14)),
                ("credit_limit", _money(default=Decimal("0.00"))),
                ("opening_balance", _money(default=Decimal("0.00"))),
                (
                    "current_balance",
                    _money(
                        default=Decimal("0.00"),
                        editable=False,
                        help_text="Sum of open invoice balances (service-managed).",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="customers_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["customer_code"],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", _id()),
                ("invoice_no", models.CharField(max_length=32, unique=True)),
                ("invoice_date", models.DateField()),
                ("due_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Draft", "Draft"),
                            ("Unpaid", "Unpaid"),
                            ("Partially Paid", "Partially Paid"),
                            ("Paid", "Paid"),
                            ("Overdue", "Overdue"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Unpaid",
                        max_length=20,
                    ),
                ),
                ("total_amount", _money(default=Decimal("0.00"))),
                ("paid_amount", _money(default=Decimal("0.00"))),
                ("balance_amount", _money(default=Decimal("0.00"))),
                ("notes", models.TextField(blank=True, default="")),
                ("terms", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="receivables.customer",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-invoice_date", "-id"],
                "indexes": [
                    models.Index(
                        fields=["customer", "status"], name="ar_inv_customer_status_idx"
                    ),
                    models.Index(fields=["due_date"], name="ar_inv_due_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceItem",
            fields=[
                ("id", _id()),
                (
                    "description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("quantity", models.DecimalField(decimal_places=4, max_digits=14)),
                ("unit_price", _money()),
                ("amount", _money()),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="receivables.invoice",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoice_lines",
                        to="inventory.item",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", _id()),
                (
                    "payment_no",
                    models.CharField(editable=False, max_length=16, unique=True),
                ),
                ("payment_date", models.DateField()),
                (
                    "amount",
                    _money(
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.01"))
                        ]
                    ),
                ),
                ("payment_method", models.CharField(default="Cash", max_length=32)),
                ("reference_no", models.CharField(blank=True, default="", max_length=64)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="receivables.customer",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="customer_payments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-payment_date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="PaymentAllocation",
            fields=[
                ("id", _id()),
                (
                    "amount",
                    _money(
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.01"))
                        ]
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "payment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="allocations",
                        to="receivables.payment",
                    ),
                ),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="allocations",
                        to="receivables.invoice",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("payment", "invoice"),
                        name="uniq_payment_invoice_allocation",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomerLedgerEntry",
            fields=[
                ("id", _id()),
                ("transaction_date", models.DateField()),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("INVOICE", "Invoice"),
                            ("PAYMENT", "Payment"),
                            ("ADJUSTMENT", "Adjustment"),
                            ("OPENING_BALANCE", "Opening Balance"),
                        ],
                        max_length=20,
                    ),
                ),
                ("reference_no", models.CharField(blank=True, default="", max_length=64)),
                (
                    "debit",
                    _money(
                        default=Decimal("0.00"),
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00"))
                        ],
                    ),
                ),
                (
                    "credit",
                    _money(
                        default=Decimal("0.00"),
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00"))
                        ],
                    ),
                ),
                ("balance", _money()),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="receivables.customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "Customer Ledger Entry",
                "verbose_name_plural": "Customer Ledger Entries",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["customer", "id"], name="ar_ledger_customer_idx"),
                    models.Index(fields=["reference_no"], name="ar_ledger_reference_idx"),
                ],
            },
        ),
    ]
