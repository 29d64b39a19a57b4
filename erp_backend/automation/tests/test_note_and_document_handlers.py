# automation/tests/test_note_and_document_handlers.py

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models import Voucher
from accounting.services.exceptions import AccountResolutionError
from automation.dispatcher import handle
from automation.events import APPLIED, SKIPPED
from automation.handlers.notes import on_credit_note_created
from automation.tests.factories import (
    created_event,
    make_credit_note,
    make_debit_note,
    make_invoice,
    make_product,
    seed_chart,
    voucher_lines,
)
from products.models import WorkOrder
from sales.models import CreditNote, Quotation

JULY_2 = datetime(2025, 7, 2, 8, 0, tzinfo=dt_timezone.utc)
ZERO = Decimal("0.00")


class NoteHandlerTests(TestCase):
    """
    GUARANTEES:
    - Credit note: Dr sales returns, Cr party ledger
    - Debit note:  Dr party ledger, Cr purchase returns
    - Notes never create a party ledger; an unknown party is fatal
    """

    def setUp(self):
        seed_chart()
        # the invoice gives customer C-1 its ledger
        handle(created_event("invoices", make_invoice(), occurred_at=JULY_2))

    def test_credit_note_numbered_and_posted(self):
        note = make_credit_note()

        result = handle(created_event("credit_notes", note, occurred_at=JULY_2))

        self.assertEqual(result.status, APPLIED)
        note.refresh_from_db()
        self.assertEqual(note.credit_note_number, "CN-2507-0001")

        voucher = Voucher.objects.get(pk=result.data["voucher_id"])
        self.assertEqual(voucher.voucher_type, Voucher.CREDIT_NOTE)
        self.assertEqual(
            voucher.narration,
            "Credit Note CN-2507-0001 issued to Asha Traders for: Damaged in transit",
        )
        self.assertEqual(
            voucher_lines(voucher),
            [
                ("Sales – Domestic", Decimal("250.00"), ZERO),
                ("Asha Traders", ZERO, Decimal("250.00")),
            ],
        )

    def test_debit_note_numbered_and_posted(self):
        note = make_debit_note()

        result = handle(created_event("debit_notes", note, occurred_at=JULY_2))

        note.refresh_from_db()
        self.assertEqual(note.debit_note_number, "DN-2507-0001")
        self.assertEqual(
            voucher_lines(Voucher.objects.get(pk=result.data["voucher_id"])),
            [
                ("Asha Traders", Decimal("120.00"), ZERO),
                ("Purchase – Finished Goods", ZERO, Decimal("120.00")),
            ],
        )

    def test_note_handler_rerun_is_skipped(self):
        note = make_credit_note()
        event = created_event("credit_notes", note, occurred_at=JULY_2)

        self.assertEqual(on_credit_note_created(event).status, APPLIED)
        self.assertEqual(on_credit_note_created(event).status, SKIPPED)
        self.assertEqual(Voucher.objects.filter(voucher_type=Voucher.CREDIT_NOTE).count(), 1)

    def test_unknown_party_is_a_configuration_error(self):
        note = make_credit_note(party_id="C-404", party_name="Nobody")

        with self.assertRaises(AccountResolutionError):
            handle(created_event("credit_notes", note, occurred_at=JULY_2))

        self.assertEqual(CreditNote.objects.get(pk=note.pk).credit_note_number, "")
        self.assertFalse(Voucher.objects.filter(voucher_type=Voucher.CREDIT_NOTE).exists())


class NumberingOnlyHandlerTests(TestCase):
    def test_quotation_numbered_once(self):
        quotation = Quotation.objects.create(customer_name="Asha Traders", grand_total=Decimal("900.00"))
        event = created_event("quotations", quotation, occurred_at=JULY_2)

        self.assertEqual(handle(event).status, APPLIED)
        quotation.refresh_from_db()
        self.assertEqual(quotation.quotation_number, "QU-2507-0001")
        self.assertFalse(Voucher.objects.exists())

    def test_work_order_numbered(self):
        product = make_product("P-9")
        first = WorkOrder.objects.create(product=product, quantity=2)
        second = WorkOrder.objects.create(product=product, quantity=5)

        handle(created_event("work_orders", first, occurred_at=JULY_2))
        handle(created_event("work_orders", second, occurred_at=JULY_2))

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual((first.work_order_number, second.work_order_number), ("WO-2507-0001", "WO-2507-0002"))

    def test_number_cannot_be_reassigned(self):
        quotation = Quotation.objects.create(customer_name="Asha Traders")
        handle(created_event("quotations", quotation, occurred_at=JULY_2))
        quotation.refresh_from_db()

        quotation.quotation_number = "QU-2507-0999"
        with self.assertRaises(ValidationError):
            quotation.save()
