# accounting/models/account.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.group import AccountGroup


class LedgerAccount(models.Model):
    """
    A postable ledger in the chart of accounts (e.g. L-4.1-1 Sales – Domestic).

    Guarantees:
    - Codes are globally unique and never reused
    - Code + name are normalized (trimmed)
    - Nature always matches a posting side (normal_balance)
    """

    ASSET = AccountGroup.ASSET
    LIABILITY = AccountGroup.LIABILITY
    EQUITY = AccountGroup.EQUITY
    INCOME = AccountGroup.INCOME
    EXPENSE = AccountGroup.EXPENSE

    NATURE_CHOICES = AccountGroup.NATURE_CHOICES

    TYPE_CASH = "CASH"
    TYPE_BANK = "BANK"
    TYPE_RECEIVABLE = "RECEIVABLE"
    TYPE_PAYABLE = "PAYABLE"
    TYPE_INVENTORY = "INVENTORY"
    TYPE_GST_OUTPUT = "GST_OUTPUT"
    TYPE_GST_INPUT = "GST_INPUT"
    TYPE_INCOME = "INCOME"
    TYPE_EXPENSE = "EXPENSE"
    TYPE_OTHER = "OTHER"

    ACCOUNT_TYPES = [
        (TYPE_CASH, "Cash"),
        (TYPE_BANK, "Bank"),
        (TYPE_RECEIVABLE, "Receivable"),
        (TYPE_PAYABLE, "Payable"),
        (TYPE_INVENTORY, "Inventory"),
        (TYPE_GST_OUTPUT, "GST Output"),
        (TYPE_GST_INPUT, "GST Input"),
        (TYPE_INCOME, "Income"),
        (TYPE_EXPENSE, "Expense"),
        (TYPE_OTHER, "Other"),
    ]

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    BALANCE_SIDES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"

    STATUS_CHOICES = [
        (ACTIVE, "Active"),
        (INACTIVE, "Inactive"),
    ]

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=150, db_index=True)

    group = models.ForeignKey(
        AccountGroup,
        on_delete=models.PROTECT,
        related_name="ledgers",
    )

    nature = models.CharField(max_length=16, choices=NATURE_CHOICES)
    account_type = models.CharField(max_length=16, choices=ACCOUNT_TYPES, default=TYPE_OTHER)
    normal_balance = models.CharField(max_length=6, choices=BALANCE_SIDES)

    is_posting = models.BooleanField(default=True)
    allow_manual_journal = models.BooleanField(default=True)
    is_system = models.BooleanField(default=False)

    status = models.CharField(max_length=8, choices=STATUS_CHOICES, default=ACTIVE)

    opening_balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    opening_balance_side = models.CharField(max_length=6, choices=BALANCE_SIDES, blank=True, default="")

    # Bank ledgers only: matched against CompanyProfile.primary_upi_id
    upi_id = models.CharField(max_length=100, blank=True, default="", db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Ledger Account"
        verbose_name_plural = "Ledger Accounts"
        indexes = [
            models.Index(fields=["group", "status"]),
            models.Index(fields=["nature"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_ledger_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_ledger_name_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(opening_balance__gte=0),
                name="chk_ledger_opening_balance_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @property
    def is_active(self) -> bool:
        return self.status == self.ACTIVE

    @classmethod
    def default_balance_side(cls, nature: str) -> str:
        return cls.DEBIT if nature in (cls.ASSET, cls.EXPENSE) else cls.CREDIT

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()
        self.upi_id = (self.upi_id or "").strip()

        if not self.code:
            raise ValidationError("Ledger code is required")
        if not self.name:
            raise ValidationError("Ledger name is required")

    def save(self, *args, **kwargs):
        if not self.normal_balance:
            self.normal_balance = self.default_balance_side(self.nature)
        if not self.opening_balance_side:
            self.opening_balance_side = self.normal_balance

        self.full_clean()
        return super().save(*args, **kwargs)
