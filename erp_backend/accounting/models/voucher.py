# accounting/models/voucher.py

"""
======================================================
PATH: accounting/models/voucher.py
======================================================
VOUCHER + VOUCHER ENTRY MODELS

A Voucher is one accounting transaction; its VoucherEntry rows are the
debit / credit lines against ledger accounts.

Guarantees:
- Immutable once created (no updates, no deletes)
- One voucher per (source_type, source_id, voucher_type) when a source is given
- Each entry carries exactly one non-zero side
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.account import LedgerAccount


class Voucher(models.Model):
    RECEIPT = "RECEIPT"
    SALES = "SALES"
    JOURNAL = "JOURNAL"
    CREDIT_NOTE = "CREDIT_NOTE"
    DEBIT_NOTE = "DEBIT_NOTE"

    VOUCHER_TYPES = [
        (RECEIPT, "Receipt Voucher"),
        (SALES, "Sales Voucher"),
        (JOURNAL, "Journal Voucher"),
        (CREDIT_NOTE, "Credit Note"),
        (DEBIT_NOTE, "Debit Note"),
    ]

    date = models.DateField(default=timezone.localdate)
    narration = models.TextField()
    voucher_type = models.CharField(max_length=16, choices=VOUCHER_TYPES)

    source_type = models.CharField(
        max_length=32,
        blank=True,
        null=True,
        help_text="Kind of triggering document (ORDER, INVOICE, ...)",
    )
    source_id = models.CharField(
        max_length=64,
        blank=True,
        null=True,
        help_text="Primary key of the triggering document",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["date"]),
            models.Index(fields=["voucher_type"]),
            models.Index(fields=["source_type", "source_id"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["source_type", "source_id", "voucher_type"],
                condition=Q(source_type__isnull=False) & Q(source_id__isnull=False),
                name="uniq_voucher_source_kind",
            )
        ]
        verbose_name = "Voucher"
        verbose_name_plural = "Vouchers"

    def __str__(self):
        return f"{self.get_voucher_type_display()} #{self.id} – {self.date}"

    def clean(self):
        self.narration = (self.narration or "").strip()
        if not self.narration:
            raise ValidationError("Voucher narration is required")

        if (self.source_type is None) != (self.source_id is None):
            raise ValidationError("source_type and source_id must be given together")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Voucher records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Voucher records are immutable and cannot be deleted")


class VoucherEntry(models.Model):
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name="entries",
    )

    account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="voucher_entries",
    )

    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    line_no = models.PositiveSmallIntegerField()

    class Meta:
        ordering = ["voucher_id", "line_no"]
        verbose_name = "Voucher Entry"
        verbose_name_plural = "Voucher Entries"
        indexes = [
            models.Index(fields=["account"]),
            models.Index(fields=["voucher"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["voucher", "line_no"],
                name="uniq_voucher_entry_line",
            ),
            models.CheckConstraint(
                condition=(Q(debit__gt=0) & Q(credit=0)) | (Q(credit__gt=0) & Q(debit=0)),
                name="chk_voucher_entry_one_side",
            ),
        ]

    def __str__(self):
        side = f"Dr {self.debit}" if self.debit else f"Cr {self.credit}"
        return f"{side} → {self.account}"

    def clean(self):
        debit = self.debit or Decimal("0.00")
        credit = self.credit or Decimal("0.00")

        if debit < 0 or credit < 0:
            raise ValidationError("Debit or credit cannot be negative")
        if (debit > 0) == (credit > 0):
            raise ValidationError("Exactly one of debit / credit must be non-zero")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("VoucherEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("VoucherEntry records are immutable and cannot be deleted")
