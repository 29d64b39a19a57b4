# sales/models/party.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models


class Party(models.Model):
    """
    A customer or supplier, keyed by its external id.

    ledger_account is the party's OWN receivable / payable ledger. It is
    linked lazily by the account resolver on the first transaction.
    """

    CUSTOMER = "Customer"
    SUPPLIER = "Supplier"

    PARTY_TYPES = [
        (CUSTOMER, "Customer"),
        (SUPPLIER, "Supplier"),
    ]

    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default="")
    party_type = models.CharField(max_length=16, choices=PARTY_TYPES, default=CUSTOMER)

    ledger_account = models.ForeignKey(
        "accounting.LedgerAccount",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="parties",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Parties"

    def __str__(self):
        return f"{self.name} ({self.party_type})"

    def clean(self):
        self.id = (self.id or "").strip()
        self.name = (self.name or "").strip()
        if not self.id:
            raise ValidationError("Party id is required")
        if not self.name:
            raise ValidationError("Party name is required")
