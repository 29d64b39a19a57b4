# automation/tests/test_invoice_handlers.py

from __future__ import annotations

import random
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.conf import settings
from django.test import TestCase

from accounting.models import Voucher
from accounting.services.exceptions import AccountResolutionError, PostingRuleError
from accounting.services.voucher_service import is_balanced
from automation.dispatcher import handle
from automation.events import APPLIED, DUPLICATE, SKIPPED
from automation.handlers.invoices import on_invoice_created, on_invoice_updated
from automation.models import ProcessedEvent
from automation.tests.factories import (
    created_event,
    ledger,
    make_invoice,
    make_product,
    seed_chart,
    updated_event,
    voucher_lines,
)
from sales.models import InvoiceItem, SalesInvoice

JUNE_12 = datetime(2025, 6, 12, 11, 0, tzinfo=dt_timezone.utc)
ZERO = Decimal("0.00")


def _sales_voucher(invoice):
    return Voucher.objects.get(source_type="INVOICE", source_id=str(invoice.pk), voucher_type=Voucher.SALES)


class InvoiceCreatedTests(TestCase):
    """
    GUARANTEES:
    - Intra-state invoice: Dr customer 1180 / Cr sales 1000, CGST 90, SGST 90
    - Inter-state invoice: IGST line instead of CGST/SGST
    - COGS is a separate journal voucher, posted only when items carry cost
    - Redelivery never posts twice
    """

    def setUp(self):
        seed_chart()

    def test_intra_state_invoice(self):
        invoice = make_invoice()

        result = handle(created_event("invoices", invoice, occurred_at=JUNE_12))

        self.assertEqual(result.status, APPLIED)
        invoice.refresh_from_db()
        self.assertEqual(invoice.invoice_number, "INV-2506-0001")

        voucher = _sales_voucher(invoice)
        self.assertEqual(voucher.narration, "Sales Invoice INV-2506-0001 to Asha Traders")
        self.assertEqual(
            voucher_lines(voucher),
            [
                ("Asha Traders", Decimal("1180.00"), ZERO),
                ("Sales – Domestic", ZERO, Decimal("1000.00")),
                ("Output GST – CGST", ZERO, Decimal("90.00")),
                ("Output GST – SGST", ZERO, Decimal("90.00")),
            ],
        )
        self.assertTrue(is_balanced(voucher))
        self.assertIsNone(result.data["cogs_voucher_id"])

    def test_inter_state_invoice_uses_igst(self):
        invoice = make_invoice(cgst="0", sgst="0", igst="180.00")

        handle(created_event("invoices", invoice, occurred_at=JUNE_12))

        self.assertEqual(
            voucher_lines(_sales_voucher(invoice)),
            [
                ("Asha Traders", Decimal("1180.00"), ZERO),
                ("Sales – Domestic", ZERO, Decimal("1000.00")),
                ("Output GST – IGST", ZERO, Decimal("180.00")),
            ],
        )

    def test_tax_free_invoice_has_no_tax_lines(self):
        invoice = make_invoice(cgst="0", sgst="0", grand_total="1000.00")

        handle(created_event("invoices", invoice, occurred_at=JUNE_12))

        self.assertEqual(len(voucher_lines(_sales_voucher(invoice))), 2)

    def test_cogs_voucher_per_inventory_account(self):
        make_product("P-1", cost_price="300.00")
        make_product("P-2", cost_price="50.00", inventory_account=ledger("Stock-in-Hand – Spares"))
        invoice = make_invoice(
            items=[
                {"product_id": "P-1", "name": "Sofa", "quantity": 2, "rate": Decimal("400.00")},
                {"product_id": "P-2", "name": "Hinge set", "quantity": 4, "rate": Decimal("50.00")},
            ]
        )

        result = handle(created_event("invoices", invoice, occurred_at=JUNE_12))

        cogs = Voucher.objects.get(pk=result.data["cogs_voucher_id"])
        self.assertEqual(cogs.voucher_type, Voucher.JOURNAL)
        self.assertEqual(cogs.narration, "Cost of goods sold for Invoice INV-2506-0001")
        self.assertEqual(
            voucher_lines(cogs),
            [
                ("Cost of Goods Sold", Decimal("800.00"), ZERO),
                ("Stock-in-Hand – Finished Goods", ZERO, Decimal("600.00")),
                ("Stock-in-Hand – Spares", ZERO, Decimal("200.00")),
            ],
        )
        self.assertTrue(is_balanced(cogs))

    def test_bad_items_are_skipped_not_fatal(self):
        make_product("P-1", cost_price="300.00")
        make_product("P-FREE", cost_price="0.00")
        invoice = make_invoice(
            items=[
                {"product_id": "P-1", "name": "Sofa", "quantity": 1, "rate": Decimal("1000.00")},
                {"product_id": "P-GONE", "name": "Unknown", "quantity": 3, "rate": Decimal("10.00")},
                {"product_id": "P-FREE", "name": "Sample", "quantity": 1, "rate": Decimal("0.00")},
                {"product_id": "P-1", "name": "Zero qty", "quantity": 0, "rate": Decimal("0.00")},
                {"product_id": "", "name": "Service", "quantity": 1, "rate": Decimal("0.00")},
            ]
        )

        with self.assertLogs("accounting.services.posting_rules_cogs", level="WARNING") as logs:
            result = handle(created_event("invoices", invoice, occurred_at=JUNE_12))

        self.assertEqual(result.status, APPLIED)
        self.assertEqual(len(logs.records), 4)
        cogs = Voucher.objects.get(pk=result.data["cogs_voucher_id"])
        self.assertEqual(voucher_lines(cogs)[0], ("Cost of Goods Sold", Decimal("300.00"), ZERO))

    def test_replay_posts_nothing_new(self):
        make_product("P-1", cost_price="300.00")
        invoice = make_invoice(items=[{"product_id": "P-1", "name": "Sofa", "quantity": 1, "rate": Decimal("1000.00")}])
        event = created_event("invoices", invoice, occurred_at=JUNE_12)

        self.assertEqual(handle(event).status, APPLIED)
        self.assertEqual(handle(event).status, DUPLICATE)
        self.assertEqual(on_invoice_created(event).status, SKIPPED)

        self.assertEqual(Voucher.objects.count(), 2)
        invoice.refresh_from_db()
        self.assertEqual(invoice.invoice_number, "INV-2506-0001")

    def test_numbered_invoice_keeps_its_number_and_is_posted(self):
        invoice = make_invoice(invoice_number="INV-2412-0007")

        handle(created_event("invoices", invoice, occurred_at=JUNE_12))

        invoice.refresh_from_db()
        self.assertEqual(invoice.invoice_number, "INV-2412-0007")
        self.assertEqual(_sales_voucher(invoice).narration, "Sales Invoice INV-2412-0007 to Asha Traders")

    def test_invoice_that_does_not_add_up_rolls_back(self):
        invoice = make_invoice(grand_total="1200.00")
        event = created_event("invoices", invoice, occurred_at=JUNE_12)

        with self.assertRaises(PostingRuleError):
            handle(event)

        invoice.refresh_from_db()
        self.assertEqual(invoice.invoice_number, "")
        self.assertFalse(Voucher.objects.exists())
        self.assertFalse(ProcessedEvent.objects.exists())

    def test_missing_sales_ledger_is_a_configuration_error(self):
        invoice = make_invoice()

        with self.settings(AUTOMATION={**settings.AUTOMATION, "ACCOUNTS": {"SALES": "No Such Ledger"}}):
            with self.assertRaises(AccountResolutionError):
                handle(created_event("invoices", invoice, occurred_at=JUNE_12))

        self.assertFalse(Voucher.objects.exists())
        self.assertFalse(SalesInvoice.objects.exclude(invoice_number="").exists())


class InvoiceBalanceProperty(TestCase):
    def setUp(self):
        seed_chart()
        make_product("P-1", cost_price="120.50")
        make_product("P-2", cost_price="33.33", inventory_account=ledger("Stock-in-Hand – Raw Material"))

    def test_randomized_invoices_always_balance(self):
        rng = random.Random(1180)
        for i in range(30):
            taxable = Decimal(rng.randint(100, 2_000_000)) / Decimal("100")
            if rng.random() < 0.5:
                half = (taxable * Decimal("0.09")).quantize(Decimal("0.01"))
                taxes = {"cgst": half, "sgst": half, "igst": ZERO}
            else:
                taxes = {"cgst": ZERO, "sgst": ZERO, "igst": (taxable * Decimal("0.18")).quantize(Decimal("0.01"))}
            total = taxable + taxes["cgst"] + taxes["sgst"] + taxes["igst"]

            invoice = make_invoice(
                customer_id=f"C-{i % 5}",
                customer_name=f"Customer {i % 5}",
                taxable_amount=taxable,
                grand_total=total,
                items=[
                    {"product_id": "P-1", "name": "A", "quantity": rng.randint(0, 5), "rate": Decimal("1")},
                    {"product_id": "P-2", "name": "B", "quantity": rng.randint(0, 5), "rate": Decimal("1")},
                ],
                **taxes,
            )
            self.assertEqual(handle(created_event("invoices", invoice, occurred_at=JUNE_12)).status, APPLIED)

        for voucher in Voucher.objects.all():
            self.assertTrue(is_balanced(voucher), voucher.narration)


class InvoiceItemsArriveLaterTests(TestCase):
    """
    GUARANTEES:
    - Items saved after the invoice was posted get their COGS voucher
    - At most one COGS voucher per invoice, however many updates follow
    - Numbering and the sales voucher stay with the created event
    """

    def setUp(self):
        seed_chart()
        make_product("P-9", cost_price="400.00")
        self.invoice = make_invoice()

    def _add_item(self, name="Teak table"):
        InvoiceItem.objects.create(
            invoice=self.invoice, product_id="P-9", name=name, quantity=1, rate=Decimal("1000.00")
        )

    def test_update_posts_missing_cogs(self):
        created = handle(created_event("invoices", self.invoice, occurred_at=JUNE_12))
        self.assertEqual(created.status, APPLIED)
        self.assertIsNone(created.data["cogs_voucher_id"])

        self._add_item()
        result = handle(updated_event("invoices", self.invoice))

        self.assertEqual(result.status, APPLIED)
        cogs = Voucher.objects.get(pk=result.data["cogs_voucher_id"])
        self.assertEqual(cogs.narration, "Cost of goods sold for Invoice INV-2506-0001")
        self.assertEqual(
            voucher_lines(cogs),
            [
                ("Cost of Goods Sold", Decimal("400.00"), ZERO),
                ("Stock-in-Hand – Finished Goods", ZERO, Decimal("400.00")),
            ],
        )

    def test_later_updates_post_nothing(self):
        handle(created_event("invoices", self.invoice, occurred_at=JUNE_12))
        self._add_item()
        handle(updated_event("invoices", self.invoice))

        self._add_item("Teak chair")
        result = handle(updated_event("invoices", self.invoice))

        self.assertEqual(result.status, SKIPPED)
        self.assertEqual(Voucher.objects.filter(voucher_type=Voucher.JOURNAL).count(), 1)

    def test_update_without_cost_posts_nothing(self):
        handle(created_event("invoices", self.invoice, occurred_at=JUNE_12))

        self.assertEqual(handle(updated_event("invoices", self.invoice)).status, SKIPPED)
        self.assertFalse(Voucher.objects.filter(voucher_type=Voucher.JOURNAL).exists())

    def test_update_before_created_waits_for_it(self):
        self._add_item()

        result = on_invoice_updated(updated_event("invoices", self.invoice))

        self.assertEqual(result.status, SKIPPED)
        self.assertFalse(Voucher.objects.exists())
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.invoice_number, "")

    def test_created_redelivery_catches_up_cogs(self):
        handle(created_event("invoices", self.invoice, occurred_at=JUNE_12))
        self._add_item()

        # a direct rerun (new event id) posts only what is missing
        result = on_invoice_created(created_event("invoices", self.invoice, occurred_at=JUNE_12, event_id="replay-1"))

        self.assertEqual(result.status, APPLIED)
        self.assertIsNone(result.data["sales_voucher_id"])
        self.assertEqual(Voucher.objects.filter(voucher_type=Voucher.SALES).count(), 1)
        self.assertEqual(Voucher.objects.filter(voucher_type=Voucher.JOURNAL).count(), 1)
