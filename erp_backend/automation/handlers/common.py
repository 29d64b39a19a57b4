# automation/handlers/common.py

"""
Shared handler steps: lock the triggering document, assign its number once.
"""

from __future__ import annotations

import logging

from django.utils import timezone

from sequences.services.numbering import get_series, next_document_number

logger = logging.getLogger(__name__)


def lock_document(model, document_id):
    """The document row, locked for the rest of the transaction (None if gone)."""
    return model.objects.select_for_update().filter(pk=document_id).first()


def assign_number_once(document, series_key: str, *, now=None) -> str | None:
    """
    Give `document` its series number unless it already has one.

    Returns the new number, or None when one was already assigned. The
    caller must hold the row lock (lock_document) so the presence check
    and the write cannot interleave with another delivery.
    """
    series = get_series(series_key)
    field = series.number_field

    current = (getattr(document, field) or "").strip()
    if current:
        logger.info(
            "Document already numbered; skipping",
            extra={"series": series_key, "document_id": str(document.pk), "number": current},
        )
        return None

    number = next_document_number(series_key, now=now or timezone.now())
    setattr(document, field, number)
    document.save(update_fields=[field, "updated_at"])

    logger.info(
        "Document number assigned",
        extra={"series": series_key, "document_id": str(document.pk), "number": number},
    )
    return number
