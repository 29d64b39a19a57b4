# products/models/product.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    COST MODEL:
    - cost_price is the unit cost recognized as COGS when invoiced
    - inventory_account is the stock ledger credited by COGS; when blank
      the default inventory ledger (AUTOMATION["ACCOUNTS"]["INVENTORY"]) is used
    - category feeds partner commission rules when an order line has none
    """

    id = models.CharField(primary_key=True, max_length=64)

    sku = models.CharField(max_length=128, blank=True, default="", db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=100, blank=True, default="", db_index=True)

    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    inventory_account = models.ForeignKey(
        "accounting.LedgerAccount",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        if self.cost_price is not None and self.cost_price < 0:
            raise ValidationError({"cost_price": "Cost price cannot be negative"})
        if self.unit_price is not None and self.unit_price < 0:
            raise ValidationError({"unit_price": "Unit price cannot be negative"})
