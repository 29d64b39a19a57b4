# automation/handlers/documents.py

"""Numbering-only handlers (quotations, work orders)."""

from __future__ import annotations

from automation.events import DocumentEvent, HandlerResult, applied, skipped
from automation.handlers.common import assign_number_once, lock_document
from products.models import WorkOrder
from sales.models import Quotation


def _number_only(event: DocumentEvent, model, series_key: str) -> HandlerResult:
    document = lock_document(model, event.document_id)
    if document is None:
        return skipped("document not found")

    number = assign_number_once(document, series_key, now=event.occurred_at)
    if number is None:
        return skipped("document already numbered", number=document.document_number)
    return applied("document numbered", number=number)


def on_quotation_created(event: DocumentEvent) -> HandlerResult:
    return _number_only(event, Quotation, "quotations")


def on_work_order_created(event: DocumentEvent) -> HandlerResult:
    return _number_only(event, WorkOrder, "work_orders")
