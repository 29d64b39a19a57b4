# accounting/services/posting_rules.py

"""
POSTING RULES: RECEIPTS, SALES, NOTES (AUTHORITATIVE)

Defines HOW a business document maps to accounting intent.

RESPONSIBILITIES:
- Construct debit / credit entries from already-resolved accounts
- Check the document's own arithmetic (grand total == parts)

THIS MODULE DOES NOT:
- Write to the database
- Create Voucher directly
- Resolve accounts (posting.py does)
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.services.exceptions import PostingRuleError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    if value is None or value == "":
        return ZERO
    try:
        amt = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise PostingRuleError(f"Invalid money value: {value!r}") from exc
    if not amt.is_finite():
        raise PostingRuleError(f"Invalid money value: {value!r}")
    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _dr(account, amount: Decimal) -> dict:
    return {"account": account, "debit": amount, "credit": ZERO}


def _cr(account, amount: Decimal) -> dict:
    return {"account": account, "debit": ZERO, "credit": amount}


def _positive(amount, label: str) -> Decimal:
    amt = _money(amount)
    if amt <= ZERO:
        raise PostingRuleError(f"{label} must be greater than zero")
    return amt


# ============================================================
# ADVANCE RECEIPT
# ============================================================


def build_receipt_entries(*, amount, bank_account, party_account) -> list[dict]:
    """
    Accounting Effect:
    - Debit  Bank            (amount)
    - Credit Party ledger    (amount)
    """
    amt = _positive(amount, "Receipt amount")
    return [_dr(bank_account, amt), _cr(party_account, amt)]


# ============================================================
# SALES INVOICE (GST)
# ============================================================


def build_sales_invoice_entries(
    *,
    party_account,
    accounts: dict,
    taxable_amount,
    cgst=None,
    sgst=None,
    igst=None,
    grand_total,
) -> list[dict]:
    """
    Accounting Effect:
    - Debit  Party ledger     (grand_total)
    - Credit Sales            (taxable_amount)
    - Credit Output IGST      (igst)            inter-state
      or
    - Credit Output CGST/SGST (cgst, sgst)      intra-state

    `accounts` holds the resolved SALES account and the tax accounts the
    invoice needs (IGST, or CGST + SGST). Zero amounts produce no line.
    """
    taxable = _money(taxable_amount)
    cgst_amt = _money(cgst)
    sgst_amt = _money(sgst)
    igst_amt = _money(igst)
    total = _positive(grand_total, "Invoice grand total")

    for label, amt in (("taxable", taxable), ("cgst", cgst_amt), ("sgst", sgst_amt), ("igst", igst_amt)):
        if amt < ZERO:
            raise PostingRuleError(f"Invoice {label} amount cannot be negative")

    if igst_amt > ZERO and (cgst_amt > ZERO or sgst_amt > ZERO):
        raise PostingRuleError("Invoice cannot carry IGST together with CGST/SGST")

    parts = taxable + cgst_amt + sgst_amt + igst_amt
    if parts != total:
        raise PostingRuleError(
            f"Invoice does not add up: grand_total={total} taxable+tax={parts}"
        )

    def _account(key: str):
        acc = accounts.get(key)
        if acc is None:
            raise PostingRuleError(f"Sales posting requires the {key} account")
        return acc

    entries = [_dr(party_account, total)]

    if taxable > ZERO:
        entries.append(_cr(_account("SALES"), taxable))

    if igst_amt > ZERO:
        entries.append(_cr(_account("IGST"), igst_amt))
    else:
        if cgst_amt > ZERO:
            entries.append(_cr(_account("CGST"), cgst_amt))
        if sgst_amt > ZERO:
            entries.append(_cr(_account("SGST"), sgst_amt))

    return entries


# ============================================================
# CREDIT / DEBIT NOTES
# ============================================================


def build_credit_note_entries(*, amount, returns_account, party_account) -> list[dict]:
    """
    Accounting Effect (sales return):
    - Debit  Sales returns    (amount)
    - Credit Party ledger     (amount)
    """
    amt = _positive(amount, "Credit note amount")
    return [_dr(returns_account, amt), _cr(party_account, amt)]


def build_debit_note_entries(*, amount, returns_account, party_account) -> list[dict]:
    """
    Accounting Effect (purchase return):
    - Debit  Party ledger     (amount)
    - Credit Purchase returns (amount)
    """
    amt = _positive(amount, "Debit note amount")
    return [_dr(party_account, amt), _cr(returns_account, amt)]
