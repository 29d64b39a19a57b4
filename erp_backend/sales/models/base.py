# sales/models/base.py

"""
NUMBERED DOCUMENT BASE

Documents (orders, invoices, quotations, notes, work orders) carry a
human-facing number that starts blank and is assigned exactly once by
automation. Once set, it can never change.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models


class NumberedDocument(models.Model):
    NUMBER_FIELD: str = ""

    class Meta:
        abstract = True

    @property
    def document_number(self) -> str:
        return getattr(self, self.NUMBER_FIELD) or ""

    def _guard_number_reassignment(self, update_fields) -> None:
        if self._state.adding or not self.NUMBER_FIELD:
            return
        if update_fields is not None and self.NUMBER_FIELD not in update_fields:
            return

        stored = (
            type(self)
            ._default_manager.filter(pk=self.pk)
            .values_list(self.NUMBER_FIELD, flat=True)
            .first()
        )
        if stored and stored != self.document_number:
            raise ValidationError(
                {self.NUMBER_FIELD: f"{self.NUMBER_FIELD} is already assigned ({stored}) and cannot change"}
            )

    def save(self, *args, **kwargs):
        setattr(self, self.NUMBER_FIELD, (self.document_number or "").strip())
        self._guard_number_reassignment(kwargs.get("update_fields"))
        return super().save(*args, **kwargs)
