# automation/handlers/notes.py

"""
CREDIT / DEBIT NOTE HANDLERS

on created: assign CN / DN number (once) and post the note voucher against
the party's existing ledger. A party without a ledger is a configuration
error: nothing is numbered or posted.
"""

from __future__ import annotations

import logging

from accounting.models import Voucher
from accounting.services.posting import (
    SOURCE_CREDIT_NOTE,
    SOURCE_DEBIT_NOTE,
    post_credit_note,
    post_debit_note,
)
from accounting.services.voucher_service import voucher_exists
from automation.events import DocumentEvent, HandlerResult, applied, skipped
from automation.handlers.common import assign_number_once, lock_document
from sales.models import CreditNote, DebitNote

logger = logging.getLogger(__name__)


def _post_note(event, *, model, series_key, source_type, voucher_type, post):
    note = lock_document(model, event.document_id)
    if note is None:
        logger.warning("Note not found for event", extra={"event_id": event.event_id, "series": series_key})
        return skipped("note not found")

    assign_number_once(note, series_key, now=event.occurred_at)

    if voucher_exists(source_type=source_type, source_id=note.pk, voucher_type=voucher_type):
        return skipped("note already posted", number=note.document_number)

    voucher = post(note)
    return applied("note posted", number=note.document_number, voucher_id=voucher.pk)


def on_credit_note_created(event: DocumentEvent) -> HandlerResult:
    return _post_note(
        event,
        model=CreditNote,
        series_key="credit_notes",
        source_type=SOURCE_CREDIT_NOTE,
        voucher_type=Voucher.CREDIT_NOTE,
        post=post_credit_note,
    )


def on_debit_note_created(event: DocumentEvent) -> HandlerResult:
    return _post_note(
        event,
        model=DebitNote,
        series_key="debit_notes",
        source_type=SOURCE_DEBIT_NOTE,
        voucher_type=Voucher.DEBIT_NOTE,
        post=post_debit_note,
    )
