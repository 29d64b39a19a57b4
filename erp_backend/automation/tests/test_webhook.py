# automation/tests/test_webhook.py

from __future__ import annotations

import json
from datetime import datetime, timezone as dt_timezone

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from accounting.models import Voucher
from automation.schemas import render_snapshot
from automation.signature import sign_payload, verify_signature
from automation.tests.factories import make_order, make_partner, seed_chart
from sales.models import Order

SECRET = "test-webhook-secret"


class SignatureTests(TestCase):
    def test_valid_signature(self):
        body = b'{"collection": "orders"}'

        self.assertTrue(verify_signature(raw_body=body, signature=sign_payload(body, SECRET)))

    def test_tampered_body_or_wrong_key(self):
        body = b'{"collection": "orders"}'
        signature = sign_payload(body, SECRET)

        self.assertFalse(verify_signature(raw_body=body + b" ", signature=signature))
        self.assertFalse(verify_signature(raw_body=body, signature=sign_payload(body, "other")))
        self.assertFalse(verify_signature(raw_body=body, signature=""))

    def test_no_secret_configured_rejects_everything(self):
        body = b"{}"
        with self.settings(AUTOMATION={"WEBHOOK_SECRET": ""}):
            self.assertFalse(verify_signature(raw_body=body, signature=sign_payload(body, "")))


class WebhookViewTests(TestCase):
    """
    GUARANTEES:
    - Unsigned / badly signed requests never reach a handler (400)
    - A valid event returns the handler outcome (200)
    - Fatal handler errors answer 500 so the sender redelivers
    """

    def setUp(self):
        seed_chart()
        self.client = APIClient()
        self.url = reverse("automation-events")
        self.order = make_order(payment_received="5000.00")

    def _envelope(self, **overrides):
        envelope = {
            "collection": "orders",
            "event_type": "created",
            "document_id": str(self.order.pk),
            "after": render_snapshot("orders", self.order),
            "occurred_at": datetime(2025, 6, 10, 9, 0, tzinfo=dt_timezone.utc).isoformat(),
        }
        envelope.update(overrides)
        return envelope

    def _post(self, payload, *, signature=None):
        body = json.dumps(payload).encode("utf-8")
        if signature is None:
            signature = sign_payload(body, SECRET)
        return self.client.generic(
            "POST",
            self.url,
            data=body,
            content_type="application/json",
            HTTP_X_AUTOMATION_SIGNATURE=signature,
        )

    def test_signed_event_is_handled(self):
        res = self._post(self._envelope())

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "applied")
        self.assertEqual(res.data["data"]["order_number"], "SO-2506-0001")
        self.assertEqual(Voucher.objects.count(), 1)

    def test_redelivery_reports_duplicate(self):
        self._post(self._envelope())

        res = self._post(self._envelope())

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "duplicate")
        self.assertEqual(Voucher.objects.count(), 1)

    def test_bad_signature_is_rejected(self):
        res = self._post(self._envelope(), signature="0" * 128)

        self.assertEqual(res.status_code, 400)
        self.order.refresh_from_db()
        self.assertEqual(self.order.order_number, "")

    def test_malformed_envelope_is_rejected(self):
        res = self._post({"collection": "orders", "event_type": "updated", "document_id": "x"})

        self.assertEqual(res.status_code, 400)
        self.assertIn("event_id", res.data["errors"])

    def test_unknown_collection_is_rejected(self):
        res = self._post(self._envelope(collection="payroll"))

        self.assertEqual(res.status_code, 400)

    def test_invalid_snapshot_is_quarantined_not_failed(self):
        after = {**render_snapshot("orders", self.order), "customer_id": ""}

        res = self._post(self._envelope(after=after))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "quarantined")

    def test_configuration_error_answers_500(self):
        partner = make_partner({})
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.DELIVERED, assigned_partner=partner)
        self.order.refresh_from_db()

        res = self._post(
            self._envelope(
                event_type="updated",
                event_id=f"orders:{self.order.pk}:delivered",
                after=render_snapshot("orders", self.order),
            )
        )

        self.assertEqual(res.status_code, 500)
        self.assertIn("CommissionConfigurationError", res.data["detail"])
