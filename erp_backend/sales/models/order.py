# sales/models/order.py

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .base import NumberedDocument


class Order(NumberedDocument):
    """
    Customer sales order.

    Key rules:
    - order_number is blank on creation and assigned once by automation
    - payment_received > 0 on creation posts an advance Receipt voucher
    - commission stays NULL until the order is Delivered and accrued
    """

    NUMBER_FIELD = "order_number"

    class Status(models.TextChoices):
        ORDERED = "Ordered", "Ordered"
        MANUFACTURING = "Manufacturing", "Manufacturing"
        READY_FOR_DISPATCH = "Ready for Dispatch", "Ready for Dispatch"
        AWAITING_PAYMENT = "Awaiting Payment", "Awaiting Payment"
        SHIPPED = "Shipped", "Shipped"
        DELIVERED = "Delivered", "Delivered"
        CANCELED = "Canceled", "Canceled"
        CANCELLATION_REQUESTED = "Cancellation Requested", "Cancellation Requested"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(max_length=32, blank=True, default="", db_index=True)

    customer_id = models.CharField(max_length=64)
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField(blank=True, default="")

    date = models.DateField(default=timezone.localdate)
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.ORDERED)

    # Money fields
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    sgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_received = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    commission = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Partner commission; NULL until accrued on delivery",
    )

    assigned_partner = models.ForeignKey(
        "partners.Partner",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer_id"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order_number"],
                condition=~Q(order_number=""),
                name="uniq_order_number_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(payment_received__gte=0),
                name="chk_order_payment_received_non_negative",
            ),
        ]

    def __str__(self):
        return self.order_number or f"Order {self.id}"

    @property
    def is_delivered(self) -> bool:
        return self.status == self.Status.DELIVERED


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")

    product_id = models.CharField(max_length=64, blank=True, default="")
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    category = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} × {self.name}"

    @property
    def line_total(self) -> Decimal:
        return (self.price or Decimal("0.00")) * self.quantity
