# automation/handlers/invoices.py

"""
INVOICE HANDLERS

on created:
- assign INV-YYMM-NNNN when the invoice arrives without a number
- Sales voucher   (Dr customer, Cr sales, Cr GST)
- COGS voucher    (Dr COGS, Cr inventory) when the items carry cost

on updated (invoice edits and line item saves):
- COGS voucher for a posted invoice that has none yet

Items saved after the invoice commits (autocommit callers) are not visible
to the created handler, so the COGS voucher is caught up by the update
event their save emits. Each voucher type is posted at most once per
invoice.
"""

from __future__ import annotations

import logging

from accounting.services.posting import (
    invoice_cogs_posted,
    invoice_is_posted,
    post_invoice_cogs,
    post_sales_invoice,
)
from automation.events import DocumentEvent, HandlerResult, applied, skipped
from automation.handlers.common import assign_number_once, lock_document
from sales.models import SalesInvoice

logger = logging.getLogger(__name__)


def _post_missing_cogs(invoice):
    if invoice_cogs_posted(invoice):
        return None
    return post_invoice_cogs(invoice)


def on_invoice_created(event: DocumentEvent) -> HandlerResult:
    invoice = lock_document(SalesInvoice, event.document_id)
    if invoice is None:
        logger.warning("Invoice not found for event", extra={"event_id": event.event_id})
        return skipped("invoice not found")

    assign_number_once(invoice, "invoices", now=event.occurred_at)

    if invoice_is_posted(invoice) and invoice_cogs_posted(invoice):
        logger.info(
            "Invoice already posted; skipping",
            extra={"invoice_id": str(invoice.pk), "invoice_number": invoice.invoice_number},
        )
        return skipped("invoice already posted", invoice_number=invoice.invoice_number)

    sales_voucher = None
    if not invoice_is_posted(invoice):
        sales_voucher = post_sales_invoice(invoice)
    cogs_voucher = _post_missing_cogs(invoice)

    if sales_voucher is None and cogs_voucher is None:
        return skipped("invoice already posted", invoice_number=invoice.invoice_number)

    return applied(
        "invoice posted",
        invoice_number=invoice.invoice_number,
        sales_voucher_id=getattr(sales_voucher, "pk", None),
        cogs_voucher_id=getattr(cogs_voucher, "pk", None),
    )


def on_invoice_updated(event: DocumentEvent) -> HandlerResult:
    invoice = lock_document(SalesInvoice, event.document_id)
    if invoice is None:
        logger.warning("Invoice not found for event", extra={"event_id": event.event_id})
        return skipped("invoice not found")

    # Numbering and the sales voucher belong to the created event
    if not invoice_is_posted(invoice):
        return skipped("invoice not posted yet")

    if invoice_cogs_posted(invoice):
        return skipped("cogs already posted", invoice_number=invoice.invoice_number)

    cogs_voucher = post_invoice_cogs(invoice)
    if cogs_voucher is None:
        return skipped("no cogs to post", invoice_number=invoice.invoice_number)

    logger.info(
        "COGS posted after invoice items arrived",
        extra={"invoice_id": str(invoice.pk), "invoice_number": invoice.invoice_number},
    )
    return applied(
        "cogs posted",
        invoice_number=invoice.invoice_number,
        cogs_voucher_id=cogs_voucher.pk,
    )
