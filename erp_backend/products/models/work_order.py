# products/models/work_order.py

import uuid

from django.db import models
from django.db.models import Q

from sales.models.base import NumberedDocument


class WorkOrder(NumberedDocument):
    """Production job for a product; numbered WO-YYMM-NNNN on creation."""

    NUMBER_FIELD = "work_order_number"

    class Status(models.TextChoices):
        PLANNED = "Planned", "Planned"
        IN_PROGRESS = "In Progress", "In Progress"
        COMPLETED = "Completed", "Completed"
        CANCELED = "Canceled", "Canceled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    work_order_number = models.CharField(max_length=32, blank=True, default="", db_index=True)

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="work_orders",
    )
    order = models.ForeignKey(
        "sales.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="work_orders",
    )

    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PLANNED)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["work_order_number"],
                condition=~Q(work_order_number=""),
                name="uniq_work_order_number_not_blank",
            ),
        ]

    def __str__(self):
        return self.work_order_number or f"Work Order {self.id}"
