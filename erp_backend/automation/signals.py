# automation/signals.py

"""
======================================================
PATH: automation/signals.py
======================================================
MODEL SIGNAL WIRING

Turns document saves into DocumentEvents:

- pre_save  : snapshot the stored row (the "before" image) for updates
- post_save : after the saving transaction COMMITS, snapshot the row again
              (items included) and hand the event to the dispatcher
- InvoiceItem post_save : an "updated" event for the parent invoice

Saves made by automation itself (number assignment, commission stamp)
touch only automation-owned fields and do not emit events.

Gated by AUTOMATION["DISPATCH_ON_SAVE"] (off in tests, which call the
dispatcher directly).
"""

from __future__ import annotations

import logging
import uuid

from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.utils import timezone

from automation.events import CREATED, UPDATED, DocumentEvent
from automation.schemas import render_snapshot
from backend.conf import automation_setting
from products.models import WorkOrder
from sales.models import CreditNote, DebitNote, InvoiceItem, Order, Quotation, SalesInvoice

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = {
    Order: "orders",
    SalesInvoice: "invoices",
    Quotation: "quotations",
    WorkOrder: "work_orders",
    CreditNote: "credit_notes",
    DebitNote: "debit_notes",
}

AUTOMATION_OWNED_FIELDS = frozenset(
    {
        "order_number",
        "invoice_number",
        "quotation_number",
        "work_order_number",
        "credit_note_number",
        "debit_note_number",
        "commission",
        "updated_at",
    }
)

_BEFORE_ATTR = "_automation_before"


def _enabled() -> bool:
    return bool(automation_setting("DISPATCH_ON_SAVE"))


def _owned_only(update_fields) -> bool:
    return bool(update_fields) and set(update_fields) <= AUTOMATION_OWNED_FIELDS


def capture_before(sender, instance, raw=False, update_fields=None, **kwargs):
    if raw or not _enabled() or instance._state.adding or _owned_only(update_fields):
        return

    stored = sender._default_manager.filter(pk=instance.pk).first()
    if stored is not None:
        setattr(instance, _BEFORE_ATTR, render_snapshot(DOCUMENT_MODELS[sender], stored))


def _dispatch_on_commit(model, *, collection, document_id, event_type, before=None, event_id=""):
    occurred_at = timezone.now()

    def _dispatch():
        from automation.dispatcher import handle

        stored = model._default_manager.filter(pk=document_id).first()
        if stored is None:
            logger.warning(
                "Saved document vanished before dispatch",
                extra={"collection": collection, "document_id": document_id},
            )
            return

        event = DocumentEvent(
            collection=collection,
            event_type=event_type,
            document_id=document_id,
            before=before,
            after=render_snapshot(collection, stored),
            event_id=event_id,
            occurred_at=occurred_at,
        )
        handle(event)

    # robust: handler errors are logged by Django, not raised into the saver
    transaction.on_commit(_dispatch, robust=True)


def _update_event_id(collection: str, document_id: str) -> str:
    return f"{collection}:{document_id}:{uuid.uuid4().hex}"


def dispatch_after_commit(sender, instance, created, raw=False, update_fields=None, **kwargs):
    if raw or not _enabled() or _owned_only(update_fields):
        return

    collection = DOCUMENT_MODELS[sender]
    document_id = str(instance.pk)
    _dispatch_on_commit(
        sender,
        collection=collection,
        document_id=document_id,
        event_type=CREATED if created else UPDATED,
        before=None if created else getattr(instance, _BEFORE_ATTR, None),
        event_id="" if created else _update_event_id(collection, document_id),
    )


def dispatch_invoice_item_after_commit(sender, instance, raw=False, **kwargs):
    """
    A saved line item is an update of its invoice.

    Outside atomic() the invoice-created event runs before any item exists;
    this update is what lets the invoice handler post the COGS voucher.
    """
    if raw or not _enabled():
        return

    document_id = str(instance.invoice_id)
    _dispatch_on_commit(
        SalesInvoice,
        collection="invoices",
        document_id=document_id,
        event_type=UPDATED,
        event_id=_update_event_id("invoices", document_id),
    )


def connect_document_signals() -> None:
    for model in DOCUMENT_MODELS:
        label = model._meta.label_lower
        pre_save.connect(capture_before, sender=model, dispatch_uid=f"automation.before.{label}")
        post_save.connect(dispatch_after_commit, sender=model, dispatch_uid=f"automation.after.{label}")

    post_save.connect(
        dispatch_invoice_item_after_commit,
        sender=InvoiceItem,
        dispatch_uid="automation.after.sales.invoiceitem",
    )
