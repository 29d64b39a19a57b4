# automation/handlers/orders.py

"""
ORDER HANDLERS

on created:
- assign SO-YYMM-NNNN (once)
- payment_received > 0 -> advance Receipt voucher (Dr bank, Cr customer)
  Both happen in the same transaction: no number without its voucher.

on updated:
- transition into Delivered -> accrue partner commission (once per order)
  An update whose before image is already Delivered is not a transition;
  events without a before image fall back to the locked-row guards.
"""

from __future__ import annotations

import logging

from accounting.services.posting import post_advance_receipt
from automation.events import DocumentEvent, HandlerResult, applied, skipped
from automation.handlers.common import assign_number_once, lock_document
from partners.services.commission import accrue_commission
from sales.models import Order

logger = logging.getLogger(__name__)


def on_order_created(event: DocumentEvent) -> HandlerResult:
    order = lock_document(Order, event.document_id)
    if order is None:
        logger.warning("Order not found for event", extra={"event_id": event.event_id})
        return skipped("order not found")

    number = assign_number_once(order, "orders", now=event.occurred_at)
    if number is None:
        return skipped("order already numbered", order_number=order.order_number)

    voucher = post_advance_receipt(order)

    return applied(
        "order numbered",
        order_number=number,
        receipt_voucher_id=getattr(voucher, "pk", None),
    )


def on_order_updated(event: DocumentEvent) -> HandlerResult:
    after_status = (event.after or {}).get("status")
    if after_status != Order.Status.DELIVERED:
        return skipped("order not delivered")

    before_status = (event.before or {}).get("status")
    if before_status == Order.Status.DELIVERED:
        return skipped("order was already delivered")

    order = lock_document(Order, event.document_id)
    if order is None:
        logger.warning("Order not found for event", extra={"event_id": event.event_id})
        return skipped("order not found")

    # The locked row is authoritative; the snapshot may be stale
    if not order.is_delivered:
        return skipped("order no longer delivered")

    amount = accrue_commission(order)
    if amount is None:
        return skipped("commission already accrued or no partner")
    if amount <= 0:
        return skipped("no commission earned")

    return applied("commission accrued", commission=str(amount))
