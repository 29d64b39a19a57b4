# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Resolve accounts, build entries (posting_rules*), call post_voucher (the engine).

This module should remain a thin adapter:
- It DOES NOT do workflows (automation handlers do).
- It DOES map business documents -> accounting entries.
- It ALWAYS calls post_voucher (engine) for immutability + idempotency.

Every function runs inside the caller's transaction: an unresolvable
account raises AccountResolutionError and the whole handler rolls back.

Vouchers per document:
- Order        -> RECEIPT  (only when an advance was paid)
- SalesInvoice -> SALES    + JOURNAL (COGS, only when cost is non-zero)
- CreditNote   -> CREDIT_NOTE
- DebitNote    -> DEBIT_NOTE
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction

from accounting.models import Voucher
from accounting.services import posting_rules
from accounting.services.account_resolver import (
    require_party_account,
    resolve_account_for_party,
    resolve_bank_account,
    resolve_semantic_account,
)
from accounting.services.posting_rules_cogs import build_cogs_entries
from accounting.services.voucher_service import post_voucher, voucher_exists
from sales.models import Party

logger = logging.getLogger(__name__)

SOURCE_ORDER = "ORDER"
SOURCE_INVOICE = "INVOICE"
SOURCE_CREDIT_NOTE = "CREDIT_NOTE"
SOURCE_DEBIT_NOTE = "DEBIT_NOTE"


def _customer_account(doc):
    return resolve_account_for_party(
        party_id=doc.customer_id,
        name=doc.customer_name,
        email=getattr(doc, "customer_email", "") or "",
        party_type=Party.CUSTOMER,
    )


# ============================================================
# ORDERS
# ============================================================


@transaction.atomic
def post_advance_receipt(order) -> Voucher | None:
    """
    Receipt voucher for an advance paid with the order.

    Returns None when nothing was paid.
    """
    amount = Decimal(order.payment_received or 0)
    if amount <= 0:
        return None

    entries = posting_rules.build_receipt_entries(
        amount=amount,
        bank_account=resolve_bank_account(),
        party_account=_customer_account(order),
    )

    return post_voucher(
        date=order.date,
        narration=f"Advance for Order #{order.order_number} via UPI",
        entries=entries,
        voucher_type=Voucher.RECEIPT,
        source_type=SOURCE_ORDER,
        source_id=order.pk,
    )


# ============================================================
# SALES INVOICES
# ============================================================


def _sales_accounts(invoice) -> dict:
    accounts = {"SALES": resolve_semantic_account("SALES")}
    if Decimal(invoice.igst or 0) > 0:
        accounts["IGST"] = resolve_semantic_account("IGST")
    else:
        if Decimal(invoice.cgst or 0) > 0:
            accounts["CGST"] = resolve_semantic_account("CGST")
        if Decimal(invoice.sgst or 0) > 0:
            accounts["SGST"] = resolve_semantic_account("SGST")
    return accounts


@transaction.atomic
def post_sales_invoice(invoice) -> Voucher:
    entries = posting_rules.build_sales_invoice_entries(
        party_account=_customer_account(invoice),
        accounts=_sales_accounts(invoice),
        taxable_amount=invoice.taxable_amount,
        cgst=invoice.cgst,
        sgst=invoice.sgst,
        igst=invoice.igst,
        grand_total=invoice.grand_total,
    )

    return post_voucher(
        date=invoice.date,
        narration=f"Sales Invoice {invoice.invoice_number} to {invoice.customer_name}",
        entries=entries,
        voucher_type=Voucher.SALES,
        source_type=SOURCE_INVOICE,
        source_id=invoice.pk,
    )


@transaction.atomic
def post_invoice_cogs(invoice) -> Voucher | None:
    """
    Companion COGS journal; a separate voucher from the sales voucher.

    Returns None when the shipped items carry no cost.
    """
    entries = build_cogs_entries(invoice.items.all())
    if not entries:
        logger.info(
            "No COGS to post for invoice",
            extra={"invoice_id": invoice.pk, "invoice_number": invoice.invoice_number},
        )
        return None

    return post_voucher(
        date=invoice.date,
        narration=f"Cost of goods sold for Invoice {invoice.invoice_number}",
        entries=entries,
        voucher_type=Voucher.JOURNAL,
        source_type=SOURCE_INVOICE,
        source_id=invoice.pk,
    )


def invoice_is_posted(invoice) -> bool:
    return voucher_exists(
        source_type=SOURCE_INVOICE,
        source_id=invoice.pk,
        voucher_type=Voucher.SALES,
    )


def invoice_cogs_posted(invoice) -> bool:
    return voucher_exists(
        source_type=SOURCE_INVOICE,
        source_id=invoice.pk,
        voucher_type=Voucher.JOURNAL,
    )


# ============================================================
# CREDIT / DEBIT NOTES
# ============================================================


@transaction.atomic
def post_credit_note(note) -> Voucher:
    entries = posting_rules.build_credit_note_entries(
        amount=note.amount,
        returns_account=resolve_semantic_account("SALES_RETURNS"),
        party_account=require_party_account(note.party_id),
    )
    return post_voucher(
        date=note.date,
        narration=f"Credit Note {note.credit_note_number} issued to {note.party_name} for: {note.reason}",
        entries=entries,
        voucher_type=Voucher.CREDIT_NOTE,
        source_type=SOURCE_CREDIT_NOTE,
        source_id=note.pk,
    )


@transaction.atomic
def post_debit_note(note) -> Voucher:
    entries = posting_rules.build_debit_note_entries(
        amount=note.amount,
        returns_account=resolve_semantic_account("PURCHASE_RETURNS"),
        party_account=require_party_account(note.party_id),
    )
    return post_voucher(
        date=note.date,
        narration=f"Debit Note {note.debit_note_number} issued to {note.party_name} for: {note.reason}",
        entries=entries,
        voucher_type=Voucher.DEBIT_NOTE,
        source_type=SOURCE_DEBIT_NOTE,
        source_id=note.pk,
    )
