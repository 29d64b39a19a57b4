# automation/handlers/__init__.py

"""
HANDLER REGISTRY

(collection, event_type) -> (handler name, callable)

The handler name is part of the idempotency key (ProcessedEvent), so
renaming a handler makes old events look unprocessed. Don't.
"""

from automation.events import CREATED, UPDATED
from automation.handlers.documents import on_quotation_created, on_work_order_created
from automation.handlers.invoices import on_invoice_created, on_invoice_updated
from automation.handlers.notes import on_credit_note_created, on_debit_note_created
from automation.handlers.orders import on_order_created, on_order_updated

HANDLERS = {
    ("orders", CREATED): ("orders.number_and_advance", on_order_created),
    ("orders", UPDATED): ("orders.delivery_commission", on_order_updated),
    ("invoices", CREATED): ("invoices.number_and_post", on_invoice_created),
    ("invoices", UPDATED): ("invoices.catch_up_cogs", on_invoice_updated),
    ("quotations", CREATED): ("quotations.number", on_quotation_created),
    ("work_orders", CREATED): ("work_orders.number", on_work_order_created),
    ("credit_notes", CREATED): ("credit_notes.number_and_post", on_credit_note_created),
    ("debit_notes", CREATED): ("debit_notes.number_and_post", on_debit_note_created),
}

COLLECTIONS = frozenset(collection for collection, _ in HANDLERS)

__all__ = ["HANDLERS", "COLLECTIONS"]
