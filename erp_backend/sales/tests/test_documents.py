# sales/tests/test_documents.py

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase

from sales.models import CreditNote, Order, SalesInvoice


class NumberedDocumentTests(TestCase):
    """
    GUARANTEES:
    - Numbers start blank and are stored trimmed
    - Once assigned, a number can never change
    - Two documents can never share a number (blank excepted)
    """

    def setUp(self):
        self.order = Order.objects.create(customer_id="C-1", customer_name="Asha Traders")

    def test_new_order_is_unnumbered(self):
        self.assertEqual(self.order.order_number, "")
        self.assertEqual(self.order.document_number, "")
        self.assertIsNone(self.order.commission)
        self.assertEqual(self.order.status, Order.Status.ORDERED)

    def test_first_assignment_then_frozen(self):
        self.order.order_number = " SO-2506-0001 "
        self.order.save(update_fields=["order_number", "updated_at"])
        self.order.refresh_from_db()
        self.assertEqual(self.order.order_number, "SO-2506-0001")

        self.order.order_number = "SO-2506-0002"
        with self.assertRaises(ValidationError):
            self.order.save()

    def test_other_fields_still_editable_after_numbering(self):
        Order.objects.filter(pk=self.order.pk).update(order_number="SO-2506-0001")
        self.order.refresh_from_db()

        self.order.status = Order.Status.SHIPPED
        self.order.save(update_fields=["status", "updated_at"])

        self.assertEqual(Order.objects.get(pk=self.order.pk).status, Order.Status.SHIPPED)

    def test_numbers_are_unique_but_blanks_are_not(self):
        SalesInvoice.objects.create(customer_id="C-1", customer_name="A")
        SalesInvoice.objects.create(customer_id="C-2", customer_name="B")
        SalesInvoice.objects.create(customer_id="C-3", customer_name="C", invoice_number="INV-2506-0001")

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                SalesInvoice.objects.create(customer_id="C-4", customer_name="D", invoice_number="INV-2506-0001")

    def test_notes_share_the_rule(self):
        note = CreditNote.objects.create(party_id="C-1", party_name="Asha Traders", credit_note_number="CN-2506-0001")

        note.credit_note_number = "CN-2506-0002"
        with self.assertRaises(ValidationError):
            note.save()
