# automation/tests/test_order_handlers.py

from __future__ import annotations

import random
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase

from accounting.models import CompanyProfile, LedgerAccount, Voucher
from accounting.services.voucher_service import is_balanced
from automation.dispatcher import handle
from automation.events import APPLIED, DUPLICATE, SKIPPED
from automation.handlers.orders import on_order_created
from automation.models import ProcessedEvent
from automation.tests.factories import created_event, ledger, make_order, seed_chart, voucher_lines
from sales.models import Order, Party

JUNE_10 = datetime(2025, 6, 10, 9, 0, tzinfo=dt_timezone.utc)


class OrderCreatedTests(TestCase):
    """
    GUARANTEES:
    - A new order gets SO-YYMM-NNNN exactly once
    - An advance payment posts one Receipt voucher: Dr bank, Cr customer
    - Redelivering the event changes nothing
    """

    def setUp(self):
        seed_chart()

    def test_advance_payment_posts_receipt_voucher(self):
        order = make_order(payment_received="5000.00", grand_total="12000.00")

        result = handle(created_event("orders", order, occurred_at=JUNE_10))

        self.assertEqual(result.status, APPLIED)
        order.refresh_from_db()
        self.assertEqual(order.order_number, "SO-2506-0001")

        voucher = Voucher.objects.get(source_type="ORDER", source_id=str(order.pk))
        self.assertEqual(voucher.voucher_type, Voucher.RECEIPT)
        self.assertEqual(voucher.narration, "Advance for Order #SO-2506-0001 via UPI")
        self.assertEqual(
            voucher_lines(voucher),
            [
                ("Bank – Current Account", Decimal("5000.00"), Decimal("0.00")),
                ("Asha Traders", Decimal("0.00"), Decimal("5000.00")),
            ],
        )
        self.assertTrue(is_balanced(voucher))

    def test_customer_ledger_is_created_once_and_linked(self):
        order = make_order(payment_received="5000.00")
        handle(created_event("orders", order, occurred_at=JUNE_10))

        party = Party.objects.get(pk="C-1")
        self.assertEqual(party.ledger_account.name, "Asha Traders")
        self.assertEqual(party.ledger_account.account_type, LedgerAccount.TYPE_RECEIVABLE)
        self.assertEqual(party.ledger_account.group.code, "1.1.2")
        # seeded L-1.1.2-1 / -2 are skipped by the counter
        self.assertEqual(party.ledger_account.code, "L-1.1.2-3")

        second = make_order(payment_received="100.00")
        handle(created_event("orders", second, occurred_at=JUNE_10))

        self.assertEqual(LedgerAccount.objects.filter(name="Asha Traders").count(), 1)
        self.assertEqual(Party.objects.count(), 1)

    def test_no_payment_means_no_voucher(self):
        order = make_order(payment_received="0.00")

        result = handle(created_event("orders", order, occurred_at=JUNE_10))

        self.assertEqual(result.status, APPLIED)
        self.assertIsNone(result.data["receipt_voucher_id"])
        order.refresh_from_db()
        self.assertEqual(order.order_number, "SO-2506-0001")
        self.assertFalse(Voucher.objects.exists())
        self.assertFalse(Party.objects.exists())

    def test_replayed_event_is_a_duplicate(self):
        order = make_order(payment_received="5000.00")
        event = created_event("orders", order, occurred_at=JUNE_10)

        first = handle(event)
        second = handle(event)

        self.assertEqual(first.status, APPLIED)
        self.assertEqual(second.status, DUPLICATE)
        order.refresh_from_db()
        self.assertEqual(order.order_number, "SO-2506-0001")
        self.assertEqual(Voucher.objects.count(), 1)
        self.assertEqual(ProcessedEvent.objects.filter(event_id=event.event_id).count(), 1)

    def test_handler_rerun_without_ledger_row_is_skipped(self):
        """A lost ProcessedEvent row still cannot double-post: the number guard holds."""
        order = make_order(payment_received="5000.00")
        event = created_event("orders", order, occurred_at=JUNE_10)

        on_order_created(event)
        again = on_order_created(event)

        self.assertEqual(again.status, SKIPPED)
        self.assertEqual(Voucher.objects.count(), 1)

    def test_orders_are_numbered_in_sequence(self):
        numbers = []
        for _ in range(3):
            order = make_order()
            handle(created_event("orders", order, occurred_at=JUNE_10))
            order.refresh_from_db()
            numbers.append(order.order_number)

        self.assertEqual(numbers, ["SO-2506-0001", "SO-2506-0002", "SO-2506-0003"])

    def test_preassigned_number_is_kept(self):
        order = make_order(order_number="SO-2401-0099", payment_received="10.00")

        result = handle(created_event("orders", order, occurred_at=JUNE_10))

        self.assertEqual(result.status, SKIPPED)
        order.refresh_from_db()
        self.assertEqual(order.order_number, "SO-2401-0099")
        self.assertFalse(Voucher.objects.exists())

    def test_missing_order_is_skipped(self):
        order = make_order()
        event = created_event("orders", order, occurred_at=JUNE_10)
        Order.objects.filter(pk=order.pk).delete()

        self.assertEqual(handle(event).status, SKIPPED)

    def test_bank_ledger_follows_company_upi(self):
        savings = ledger("Bank – Savings Account")
        savings.upi_id = "acme@okbank"
        savings.save()
        CompanyProfile.objects.create(name="Acme Furniture", primary_upi_id="acme@okbank")

        order = make_order(payment_received="750.00")
        handle(created_event("orders", order, occurred_at=JUNE_10))

        voucher = Voucher.objects.get(source_type="ORDER", source_id=str(order.pk))
        self.assertEqual(voucher_lines(voucher)[0], ("Bank – Savings Account", Decimal("750.00"), Decimal("0.00")))


class OrderBalanceProperty(TestCase):
    def setUp(self):
        seed_chart()

    def test_receipts_balance_for_many_orders(self):
        rng = random.Random(2506)
        for i in range(25):
            paid = Decimal(rng.randint(1, 500000)) / Decimal("100")
            order = make_order(customer_id=f"C-{i % 4}", customer_name=f"Customer {i % 4}", payment_received=paid)
            handle(created_event("orders", order, occurred_at=JUNE_10))

        self.assertEqual(Voucher.objects.count(), 25)
        for voucher in Voucher.objects.all():
            self.assertTrue(is_balanced(voucher), voucher.narration)
