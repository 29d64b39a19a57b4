# accounting/services/voucher_service.py

"""
======================================================
PATH: accounting/services/voucher_service.py
======================================================
VOUCHER SERVICE (POSTING ENGINE)

This module is the ONLY place allowed to:
- Create Voucher
- Create VoucherEntry
- Enforce idempotency via (source_type, source_id, voucher_type)

Everything else (advance receipts, invoices, COGS, notes) must pass through here.

Balance policy:
- Entry SHAPE is always validated here.
- Sum(debit) == Sum(credit) is the caller's job (posting rules build
  balanced entries). AUTOMATION["STRICT_BALANCE"] turns on engine-side
  enforcement as well.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.models import LedgerAccount, Voucher, VoucherEntry
from accounting.services.exceptions import IdempotencyError, VoucherCreationError
from backend.conf import automation_setting

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    if value is None or value == "":
        return ZERO

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise VoucherCreationError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise VoucherCreationError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _as_date(value) -> date:
    if value is None:
        return timezone.localdate()
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise VoucherCreationError(f"Invalid voucher date: {value!r}") from exc


def _normalize_source(source_type, source_id) -> tuple[str | None, str | None]:
    st = str(source_type).strip() if source_type is not None else ""
    sid = str(source_id).strip() if source_id is not None else ""

    if not st and not sid:
        return None, None
    if not st or not sid:
        raise VoucherCreationError("source_type and source_id must be given together")
    return st, sid


def _normalize_entries(entries) -> list[dict]:
    if not entries:
        raise VoucherCreationError("Voucher must contain at least one entry")

    normalized: list[dict] = []
    for line in entries:
        if not isinstance(line, dict):
            raise VoucherCreationError("Each entry must be an object/dict")

        account = line.get("account")
        if account is None:
            raise VoucherCreationError("Entry missing account")
        if not isinstance(account, LedgerAccount):
            raise VoucherCreationError(f"Entry account must be a LedgerAccount, got {type(account).__name__}")

        if not account.is_active:
            raise VoucherCreationError(f"Account {account.code} is inactive")
        if not account.is_posting:
            raise VoucherCreationError(f"Account {account.code} does not accept postings")

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise VoucherCreationError("Debit or credit cannot be negative")
        if debit > 0 and credit > 0:
            raise VoucherCreationError("An entry cannot have both debit and credit")
        if debit == 0 and credit == 0:
            raise VoucherCreationError("An entry must have either debit or credit")

        normalized.append({"account": account, "debit": debit, "credit": credit})

    return normalized


def _sum_sides(lines) -> tuple[Decimal, Decimal]:
    debits = sum((l["debit"] for l in lines), ZERO)
    credits = sum((l["credit"] for l in lines), ZERO)
    return debits, credits


# ============================================================
# PUBLIC API
# ============================================================


@transaction.atomic
def post_voucher(
    *,
    date=None,
    narration: str,
    entries: list,
    voucher_type: str,
    source_type: str | None = None,
    source_id: str | None = None,
) -> Voucher:
    """
    Create exactly one Voucher with its entries.

    Raises:
        VoucherCreationError: malformed entries / header
        IdempotencyError: a voucher of this type already exists for the source
    """
    narration = (narration or "").strip()
    if not narration:
        raise VoucherCreationError("Voucher narration is required")

    if voucher_type not in dict(Voucher.VOUCHER_TYPES):
        raise VoucherCreationError(f"Unknown voucher type: {voucher_type!r}")

    lines = _normalize_entries(entries)
    source_type, source_id = _normalize_source(source_type, source_id)
    voucher_date = _as_date(date)

    if automation_setting("STRICT_BALANCE"):
        debits, credits = _sum_sides(lines)
        if debits != credits:
            raise VoucherCreationError(
                f"Voucher not balanced: debits={debits} credits={credits}"
            )

    source_filter = {
        "source_type": source_type,
        "source_id": source_id,
        "voucher_type": voucher_type,
    }

    # Clear error before DB constraint race handling
    if source_type and Voucher.objects.filter(**source_filter).exists():
        raise IdempotencyError(
            f"{voucher_type} voucher already exists for {source_type}:{source_id}"
        )

    try:
        with transaction.atomic():
            voucher = Voucher.objects.create(
                date=voucher_date,
                narration=narration,
                voucher_type=voucher_type,
                source_type=source_type,
                source_id=source_id,
            )
    except (IntegrityError, ValidationError) as exc:
        if source_type and Voucher.objects.filter(**source_filter).exists():
            raise IdempotencyError(
                f"{voucher_type} voucher already exists for {source_type}:{source_id}"
            ) from exc
        raise VoucherCreationError(f"Failed to create voucher: {exc}") from exc

    VoucherEntry.objects.bulk_create(
        [
            VoucherEntry(
                voucher=voucher,
                account=line["account"],
                debit=line["debit"],
                credit=line["credit"],
                line_no=i,
            )
            for i, line in enumerate(lines, start=1)
        ]
    )

    logger.info(
        "Voucher posted",
        extra={
            "voucher_id": voucher.id,
            "voucher_type": voucher_type,
            "source_type": source_type,
            "source_id": source_id,
            "lines": len(lines),
        },
    )
    return voucher


def voucher_totals(voucher: Voucher) -> tuple[Decimal, Decimal]:
    """(total debit, total credit) of a stored voucher."""
    agg = VoucherEntry.objects.filter(voucher=voucher).aggregate(
        debit=Sum("debit"),
        credit=Sum("credit"),
    )
    return (agg.get("debit") or ZERO), (agg.get("credit") or ZERO)


def is_balanced(voucher: Voucher) -> bool:
    debit, credit = voucher_totals(voucher)
    return debit == credit


def voucher_exists(*, source_type: str, source_id, voucher_type: str) -> bool:
    return Voucher.objects.filter(
        source_type=source_type,
        source_id=str(source_id),
        voucher_type=voucher_type,
    ).exists()
