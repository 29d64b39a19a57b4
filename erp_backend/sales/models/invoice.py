# sales/models/invoice.py

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .base import NumberedDocument


class SalesInvoice(NumberedDocument):
    """
    GST sales invoice.

    Amount rule (checked when posting, not here):
        grand_total == taxable_amount + cgst + sgst + igst

    Intra-state invoices carry CGST + SGST; inter-state invoices carry IGST.
    """

    NUMBER_FIELD = "invoice_number"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_number = models.CharField(max_length=32, blank=True, default="", db_index=True)

    order = models.ForeignKey(
        "sales.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    customer_id = models.CharField(max_length=64)
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField(blank=True, default="")

    date = models.DateField(default=timezone.localdate)

    taxable_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    sgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    igst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["customer_id"]),
            models.Index(fields=["date"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["invoice_number"],
                condition=~Q(invoice_number=""),
                name="uniq_invoice_number_not_blank",
            ),
        ]

    def __str__(self):
        return self.invoice_number or f"Invoice {self.id}"

    @property
    def is_inter_state(self) -> bool:
        return (self.igst or Decimal("0.00")) > 0


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(SalesInvoice, on_delete=models.CASCADE, related_name="items")

    product_id = models.CharField(max_length=64, blank=True, default="")
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    category = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} × {self.name}"
