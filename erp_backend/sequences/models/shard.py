# sequences/models/shard.py

"""
======================================================
PATH: sequences/models/shard.py
======================================================
COUNTER SHARD MODEL

One slice of a logical counter.

Guarantees:
- (counter_name, shard_index) is unique
- count is never negative and never decremented
- logical counter value = sum(count) over all shards of the name
- shards are created lazily and never deleted in normal operation
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class CounterShard(models.Model):
    counter_name = models.CharField(max_length=100)
    shard_index = models.PositiveSmallIntegerField()

    count = models.BigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["counter_name", "shard_index"]
        verbose_name = "Counter Shard"
        verbose_name_plural = "Counter Shards"
        indexes = [
            models.Index(fields=["counter_name"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["counter_name", "shard_index"],
                name="uniq_counter_shard",
            ),
            models.CheckConstraint(
                condition=Q(count__gte=0),
                name="chk_counter_shard_non_negative",
            ),
            models.CheckConstraint(
                condition=~Q(counter_name=""),
                name="chk_counter_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.counter_name}[{self.shard_index}]={self.count}"

    def save(self, *args, **kwargs):
        if self.pk:
            previous = (
                type(self).objects.filter(pk=self.pk).values_list("count", flat=True).first()
            )
            if previous is not None and self.count < previous:
                raise ValidationError("Counter shards are increment-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Counter shards cannot be deleted")
