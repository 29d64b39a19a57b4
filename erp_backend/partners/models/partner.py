# partners/models/partner.py

"""
PARTNERS + COMMISSION

- Partner: a sales partner who can be assigned to orders
- CommissionRule: percent commission per product category
- PartnerWallet: running commission owed to the partner

Wallet rule:
- commission_payable only ever grows through accrue_commission()
  (F() increments inside the order's transaction)
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Partner(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class CommissionRule(models.Model):
    partner = models.ForeignKey(Partner, on_delete=models.CASCADE, related_name="commission_rules")
    category = models.CharField(max_length=100)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        help_text="Percent of line value, e.g. 7.50",
    )

    class Meta:
        ordering = ["partner", "category"]
        constraints = [
            models.UniqueConstraint(
                fields=["partner", "category"],
                name="uniq_commission_rule_partner_category",
            ),
            models.CheckConstraint(
                condition=Q(commission_rate__gte=0) & Q(commission_rate__lte=100),
                name="chk_commission_rate_percent",
            ),
        ]

    def __str__(self):
        return f"{self.partner} · {self.category}: {self.commission_rate}%"

    def clean(self):
        self.category = (self.category or "").strip()
        if not self.category:
            raise ValidationError({"category": "Category is required"})


class PartnerWallet(models.Model):
    partner = models.OneToOneField(Partner, on_delete=models.CASCADE, related_name="wallet")
    commission_payable = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(commission_payable__gte=0),
                name="chk_wallet_commission_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.partner} wallet ({self.commission_payable})"
