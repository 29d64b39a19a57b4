# accounting/services/posting_rules_cogs.py

"""
POSTING RULES: COST OF GOODS SOLD (COGS)

Authoritative rule for recognizing Cost of Goods Sold when an invoice
ships products.

Accounting rule:
- Debit  COGS expense                      (total cost)
- Credit each product's inventory ledger   (its share; merged per account)

Best effort on line items:
- A line whose product cannot be found, or whose quantity / cost is not
  positive, contributes nothing and is logged. It never aborts the voucher.

This module:
- DOES NOT save vouchers
- DOES NOT touch stock quantities
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.services.account_resolver import resolve_semantic_account
from products.models import Product

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _decimal(value) -> Decimal | None:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    return d if d.is_finite() else None


def item_cost_lines(items) -> list[tuple[Product, Decimal]]:
    """
    (product, cost) for every line item that carries a positive cost.

    Items only need `product_id` and `quantity` attributes.
    """
    items = list(items)
    product_ids = {str(getattr(i, "product_id", "") or "").strip() for i in items}
    product_ids.discard("")
    products = Product.objects.select_related("inventory_account").in_bulk(list(product_ids))

    lines: list[tuple[Product, Decimal]] = []
    for item in items:
        product_id = str(getattr(item, "product_id", "") or "").strip()
        product = products.get(product_id)
        if product is None:
            logger.warning(
                "COGS: line item skipped, product not found",
                extra={"product_id": product_id or None},
            )
            continue

        qty = _decimal(getattr(item, "quantity", None))
        if qty is None or qty <= 0:
            logger.warning(
                "COGS: line item skipped, quantity not positive",
                extra={"product_id": product_id, "quantity": str(getattr(item, "quantity", None))},
            )
            continue

        unit_cost = _decimal(product.cost_price)
        if unit_cost is None or unit_cost <= 0:
            logger.warning(
                "COGS: line item skipped, product has no cost",
                extra={"product_id": product_id},
            )
            continue

        cost = (qty * unit_cost).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        if cost > ZERO:
            lines.append((product, cost))

    return lines


def build_cogs_entries(items) -> list[dict]:
    """
    COGS entries for an invoice's line items; [] when the total cost is zero.

    Example output:
    [
        {"account": <COGS>, "debit": 700, "credit": 0},
        {"account": <Stock-in-Hand – Finished Goods>, "debit": 0, "credit": 500},
        {"account": <Stock-in-Hand – Spares>, "debit": 0, "credit": 200},
    ]
    """
    lines = item_cost_lines(items)
    if not lines:
        return []

    default_inventory = None
    credits: dict[int, dict] = {}

    for product, cost in lines:
        account = product.inventory_account
        if account is None:
            if default_inventory is None:
                default_inventory = resolve_semantic_account("INVENTORY")
            account = default_inventory

        line = credits.setdefault(
            account.pk,
            {"account": account, "debit": ZERO, "credit": ZERO},
        )
        line["credit"] += cost

    total = sum((c["credit"] for c in credits.values()), ZERO)

    return [
        {"account": resolve_semantic_account("COGS"), "debit": total, "credit": ZERO},
        *credits.values(),
    ]
