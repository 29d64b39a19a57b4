# automation/tests/test_dispatcher.py

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.db import OperationalError
from django.test import TestCase, TransactionTestCase

from automation.dispatcher import handle
from automation.events import (
    APPLIED,
    DUPLICATE,
    QUARANTINED,
    SKIPPED,
    AutomationError,
    DocumentEvent,
    UnknownEventError,
)
from automation.handlers.orders import on_order_created
from automation.models import ProcessedEvent, QuarantinedEvent
from automation.schemas import render_snapshot
from automation.tests.factories import created_event, make_order, make_partner, updated_event
from automation.transactions import run_in_transaction
from partners.models import CommissionRule, PartnerWallet
from partners.services.commission import CommissionConfigurationError
from sales.models import Order


class DocumentEventTests(TestCase):
    def test_created_event_gets_a_stable_id(self):
        event = DocumentEvent(collection="orders", event_type="created", document_id=" 42 ")

        self.assertEqual(event.document_id, "42")
        self.assertEqual(event.event_id, "orders:42:created")

    def test_update_event_requires_an_id(self):
        with self.assertRaises(AutomationError):
            DocumentEvent(collection="orders", event_type="updated", document_id="42")

    def test_unknown_event_type(self):
        with self.assertRaises(UnknownEventError):
            DocumentEvent(collection="orders", event_type="deleted", document_id="42")


class DispatcherRoutingTests(TestCase):
    def test_unknown_collection_is_rejected(self):
        event = DocumentEvent(collection="payroll", event_type="created", document_id="1")

        with self.assertRaises(UnknownEventError):
            handle(event)

    def test_event_without_handler_is_skipped(self):
        order = make_order()
        event = DocumentEvent(
            collection="quotations",
            event_type="updated",
            document_id=str(order.pk),
            event_id="quotations:1:abc",
        )

        result = handle(event)

        self.assertEqual(result.status, SKIPPED)
        self.assertFalse(ProcessedEvent.objects.exists())

    def test_invalid_snapshot_is_quarantined(self):
        order = make_order()
        snapshot = render_snapshot("orders", order)
        snapshot["payment_received"] = "-5.00"
        snapshot["status"] = "Teleported"

        result = handle(created_event("orders", order, after=snapshot))

        self.assertEqual(result.status, QUARANTINED)
        quarantined = QuarantinedEvent.objects.get()
        self.assertEqual(quarantined.document_id, str(order.pk))
        self.assertIn("payment_received", quarantined.errors["after"])
        self.assertIn("status", quarantined.errors["after"])
        order.refresh_from_db()
        self.assertEqual(order.order_number, "")

    def test_unsupported_schema_version_is_quarantined(self):
        order = make_order()
        snapshot = {**render_snapshot("orders", order), "schema_version": 9}

        self.assertEqual(handle(created_event("orders", order, after=snapshot)).status, QUARANTINED)

    def test_outcome_is_recorded(self):
        order = make_order()

        result = handle(created_event("orders", order))

        processed = ProcessedEvent.objects.get()
        self.assertEqual(processed.handler, "orders.number_and_advance")
        self.assertEqual(processed.outcome, result.status)
        self.assertEqual(processed.event_id, f"orders:{order.pk}:created")


class DeliveryCommissionTests(TestCase):
    """
    GUARANTEES:
    - Delivered order -> partner commission accrued once
    - Redelivered or repeated Delivered events change nothing
    """

    def setUp(self):
        self.partner = make_partner({"Sofas": "5"})
        self.order = make_order(
            assigned_partner=self.partner,
            items=[{"name": "Chesterfield", "quantity": 2, "price": Decimal("1500.00"), "category": "Sofas"}],
        )

    def _deliver(self):
        before = render_snapshot("orders", self.order)
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.DELIVERED)
        self.order.refresh_from_db()
        return before

    def test_delivered_twice_credits_wallet_once(self):
        before = self._deliver()
        first = updated_event("orders", self.order, before=before)
        second = updated_event("orders", self.order, before=before)

        self.assertEqual(handle(first).status, APPLIED)
        self.assertEqual(handle(first).status, DUPLICATE)
        self.assertEqual(handle(second).status, SKIPPED)

        self.assertEqual(PartnerWallet.objects.get(partner=self.partner).commission_payable, Decimal("150.00"))
        self.order.refresh_from_db()
        self.assertEqual(self.order.commission, Decimal("150.00"))

    def test_only_the_transition_into_delivered_accrues(self):
        CommissionRule.objects.filter(partner=self.partner).update(commission_rate=Decimal("0"))
        before = self._deliver()
        self.assertEqual(handle(updated_event("orders", self.order, before=before)).status, SKIPPED)

        # a rate added later does not pay out on an edit of the delivered order
        CommissionRule.objects.filter(partner=self.partner).update(commission_rate=Decimal("5"))
        result = handle(updated_event("orders", self.order, before=render_snapshot("orders", self.order)))

        self.assertEqual(result.status, SKIPPED)
        self.assertEqual(result.detail, "order was already delivered")
        self.assertFalse(PartnerWallet.objects.filter(commission_payable__gt=0).exists())
        self.order.refresh_from_db()
        self.assertIsNone(self.order.commission)

    def test_other_status_changes_are_ignored(self):
        before = render_snapshot("orders", self.order)
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.SHIPPED)
        self.order.refresh_from_db()

        result = handle(updated_event("orders", self.order, before=before))

        self.assertEqual(result.status, SKIPPED)
        self.assertFalse(PartnerWallet.objects.exists())

    def test_stale_delivered_snapshot_is_checked_against_the_row(self):
        before = self._deliver()
        event = updated_event("orders", self.order, before=before)
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.CANCELED)

        self.assertEqual(handle(event).status, SKIPPED)
        self.assertFalse(PartnerWallet.objects.exists())

    def test_missing_rules_propagate_and_record_nothing(self):
        partner = make_partner({})
        Order.objects.filter(pk=self.order.pk).update(assigned_partner=partner)
        self._deliver()
        event = updated_event("orders", self.order)

        with self.assertRaises(CommissionConfigurationError):
            handle(event)

        self.assertFalse(ProcessedEvent.objects.exists())


class RunInTransactionTests(TransactionTestCase):
    def test_retries_contention_then_succeeds(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise OperationalError("database is locked")
            return "ok"

        self.assertEqual(run_in_transaction(flaky, attempts=5, backoff=0), "ok")
        self.assertEqual(len(calls), 3)

    def test_gives_up_after_the_last_attempt(self):
        fn = mock.Mock(side_effect=OperationalError("deadlock detected"))

        with self.assertRaises(OperationalError):
            run_in_transaction(fn, attempts=2, backoff=0)

        self.assertEqual(fn.call_count, 2)

    def test_other_errors_are_not_retried(self):
        fn = mock.Mock(side_effect=ValueError("bad data"))

        with self.assertRaises(ValueError):
            run_in_transaction(fn, attempts=5, backoff=0)

        self.assertEqual(fn.call_count, 1)

    def test_dispatch_retries_handler_contention(self):
        order = make_order()
        event = created_event("orders", order)
        attempts = []

        def contended(evt):
            attempts.append(1)
            if len(attempts) == 1:
                raise OperationalError("could not serialize access")
            return on_order_created(evt)

        with mock.patch.dict(
            "automation.handlers.HANDLERS",
            {("orders", "created"): ("orders.number_and_advance", contended)},
        ):
            result = handle(event)

        self.assertEqual(result.status, APPLIED)
        self.assertEqual(len(attempts), 2)
        self.assertEqual(ProcessedEvent.objects.count(), 1)
