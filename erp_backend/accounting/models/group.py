# accounting/models/group.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class AccountGroup(models.Model):
    """
    A node of the chart of accounts tree (e.g. 1.1.2 Trade Receivables).

    Groups classify ledgers; vouchers never post to a group directly.
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    NATURE_CHOICES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (INCOME, "Income"),
        (EXPENSE, "Expense"),
    ]

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=150)
    nature = models.CharField(max_length=16, choices=NATURE_CHOICES)

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    sort_order = models.PositiveIntegerField(default=0)
    is_system = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account Group"
        verbose_name_plural = "Account Groups"
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_group_code_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError("Group code is required")
        if not self.name:
            raise ValidationError("Group name is required")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
