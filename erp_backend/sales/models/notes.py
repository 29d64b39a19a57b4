# sales/models/notes.py

"""
CREDIT / DEBIT NOTES

- CreditNote: issued to a customer (sales return) -> Dr Sales returns, Cr party
- DebitNote:  issued to a supplier (purchase return) -> Dr party, Cr Purchase returns

Both require the party to already have a ledger account.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .base import NumberedDocument


class _PartyNote(NumberedDocument):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    party_id = models.CharField(max_length=64)
    party_name = models.CharField(max_length=200)

    date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]


class CreditNote(_PartyNote):
    NUMBER_FIELD = "credit_note_number"

    credit_note_number = models.CharField(max_length=32, blank=True, default="", db_index=True)

    invoice = models.ForeignKey(
        "sales.SalesInvoice",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="credit_notes",
    )

    class Meta(_PartyNote.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["credit_note_number"],
                condition=~Q(credit_note_number=""),
                name="uniq_credit_note_number_not_blank",
            ),
        ]

    def __str__(self):
        return self.credit_note_number or f"Credit Note {self.id}"


class DebitNote(_PartyNote):
    NUMBER_FIELD = "debit_note_number"

    debit_note_number = models.CharField(max_length=32, blank=True, default="", db_index=True)

    class Meta(_PartyNote.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["debit_note_number"],
                condition=~Q(debit_note_number=""),
                name="uniq_debit_note_number_not_blank",
            ),
        ]

    def __str__(self):
        return self.debit_note_number or f"Debit Note {self.id}"
