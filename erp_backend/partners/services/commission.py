# partners/services/commission.py

"""
======================================================
PATH: partners/services/commission.py
======================================================
COMMISSION ACCRUAL ENGINE

Answers ONE question:
"How much commission does this delivered order owe its partner?"

Rules:
- Per line item: price × quantity × rate / 100, where rate is the
  partner's rule for the item's category (the product's category when the
  item carries none). No rule / zero rate adds zero.
- The total is rounded to 2 dp.

Exactly-once:
- The order row is locked; a non-NULL order.commission means the accrual
  already happened and the call is a no-op.
- Wallet increment (F()) and order stamp are written in the same
  transaction.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.db.models import F

from partners.models import CommissionRule, PartnerWallet
from products.models import Product
from sales.models import Order

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


# ============================================================
# DOMAIN ERRORS
# ============================================================


class CommissionError(Exception):
    """Base exception for commission accrual failures."""


class CommissionConfigurationError(CommissionError):
    """Raised when a partner has no commission matrix to apply."""


# ============================================================
# COMPUTATION (PURE)
# ============================================================


def _decimal(value) -> Decimal:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    return d if d.is_finite() else ZERO


def _rate_map(rules) -> dict[str, Decimal]:
    if isinstance(rules, dict):
        return {str(k).strip(): _decimal(v) for k, v in rules.items()}
    return {str(r.category).strip(): _decimal(r.commission_rate) for r in rules}


def compute_commission(items, rules, product_categories: dict | None = None) -> Decimal:
    """
    Commission for a set of line items.

    Args:
        items: objects with price, quantity, category, product_id
        rules: {category: rate%} or iterable of CommissionRule
        product_categories: {product_id: category} fallback for items
            without a category
    """
    rates = _rate_map(rules)
    product_categories = product_categories or {}

    total = ZERO
    for item in items:
        category = (getattr(item, "category", "") or "").strip()
        if not category:
            category = (product_categories.get(str(getattr(item, "product_id", "") or "")) or "").strip()

        rate = rates.get(category, ZERO)
        if rate <= 0:
            continue

        line_value = _decimal(getattr(item, "price", 0)) * _decimal(getattr(item, "quantity", 0))
        if line_value <= 0:
            continue

        total += line_value * rate / Decimal("100")

    return total.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _product_categories(items) -> dict[str, str]:
    ids = {str(i.product_id) for i in items if getattr(i, "product_id", "") and not (i.category or "").strip()}
    if not ids:
        return {}
    return dict(Product.objects.filter(pk__in=ids).values_list("id", "category"))


# ============================================================
# ACCRUAL (TRANSACTIONAL)
# ============================================================


@transaction.atomic
def accrue_commission(order: Order) -> Decimal | None:
    """
    Accrue the assigned partner's commission for a delivered order.

    Returns:
        Decimal: the amount accrued (0.00 when no rule matched)
        None: already accrued, or no partner assigned
    """
    order = Order.objects.select_for_update().get(pk=order.pk)

    if order.commission is not None:
        logger.info(
            "Commission already accrued; skipping",
            extra={"order_id": str(order.pk), "commission": str(order.commission)},
        )
        return None

    if order.assigned_partner_id is None:
        logger.info("Order has no assigned partner; no commission", extra={"order_id": str(order.pk)})
        return None

    rules = list(CommissionRule.objects.filter(partner_id=order.assigned_partner_id))
    if not rules:
        raise CommissionConfigurationError(
            f"Partner {order.assigned_partner_id} has no commission rules configured"
        )

    items = list(order.items.all())
    amount = compute_commission(items, rules, _product_categories(items))

    if amount <= 0:
        logger.info(
            "No commission earned on order",
            extra={"order_id": str(order.pk), "partner_id": str(order.assigned_partner_id)},
        )
        return amount

    wallet, _ = PartnerWallet.objects.get_or_create(partner_id=order.assigned_partner_id)
    PartnerWallet.objects.filter(pk=wallet.pk).update(
        commission_payable=F("commission_payable") + amount
    )

    order.commission = amount
    order.save(update_fields=["commission", "updated_at"])

    logger.info(
        "Commission accrued",
        extra={
            "order_id": str(order.pk),
            "partner_id": str(order.assigned_partner_id),
            "commission": str(amount),
        },
    )
    return amount
