# sales/models/quotation.py

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .base import NumberedDocument


class Quotation(NumberedDocument):
    NUMBER_FIELD = "quotation_number"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    quotation_number = models.CharField(max_length=32, blank=True, default="", db_index=True)

    customer_id = models.CharField(max_length=64, blank=True, default="")
    customer_name = models.CharField(max_length=200)

    date = models.DateField(default=timezone.localdate)
    valid_until = models.DateField(null=True, blank=True)
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["quotation_number"],
                condition=~Q(quotation_number=""),
                name="uniq_quotation_number_not_blank",
            ),
        ]

    def __str__(self):
        return self.quotation_number or f"Quotation {self.id}"
