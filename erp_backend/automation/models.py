# automation/models.py

"""
======================================================
PATH: automation/models.py
======================================================
AUTOMATION LEDGERS

ProcessedEvent
- One row per (event_id, handler) that ran to completion.
- Written in the SAME transaction as the handler's side effects, so a
  row exists if and only if those effects committed.

QuarantinedEvent
- Events whose snapshots failed validation. Kept for operators; never
  retried automatically.
"""

from __future__ import annotations

from django.db import models


class ProcessedEvent(models.Model):
    event_id = models.CharField(max_length=200)
    handler = models.CharField(max_length=100)

    collection = models.CharField(max_length=50)
    event_type = models.CharField(max_length=16)
    document_id = models.CharField(max_length=64)

    outcome = models.CharField(max_length=16)
    detail = models.CharField(max_length=255, blank=True, default="")

    processed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-processed_at"]
        indexes = [
            models.Index(fields=["collection", "document_id"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["event_id", "handler"],
                name="uniq_processed_event_handler",
            )
        ]

    def __str__(self):
        return f"{self.handler} · {self.event_id} ({self.outcome})"


class QuarantinedEvent(models.Model):
    event_id = models.CharField(max_length=200, db_index=True)

    collection = models.CharField(max_length=50)
    event_type = models.CharField(max_length=16)
    document_id = models.CharField(max_length=64)

    payload = models.JSONField(default=dict)
    errors = models.JSONField(default=dict)

    is_resolved = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["collection", "document_id"]),
            models.Index(fields=["is_resolved"]),
        ]

    def __str__(self):
        return f"Quarantined {self.collection}/{self.document_id} ({self.event_id})"
