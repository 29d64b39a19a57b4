# accounting/services/chart_seed.py

"""
DEFAULT CHART OF ACCOUNTS

Groups + ledgers every deployment starts with. seed_chart_of_accounts()
is idempotent: existing rows (matched by code) are corrected in place,
never duplicated.

After seeding, each group's ledger counter ("ledger_accounts:<group>") is
raised past the seeded codes so lazily created party ledgers never
collide with them.
"""

from __future__ import annotations

import logging
import re

from django.db import transaction

from accounting.models import AccountGroup, LedgerAccount
from sequences.services.allocator import raise_counter_to

logger = logging.getLogger(__name__)

A = AccountGroup.ASSET
L = AccountGroup.LIABILITY
E = AccountGroup.EQUITY
R = AccountGroup.INCOME
X = AccountGroup.EXPENSE

# (code, name, nature, parent_code, is_system)
DEFAULT_GROUPS = [
    ("1", "ASSETS", A, None, False),
    ("1.1", "Current Assets", A, "1", False),
    ("1.1.1", "Cash & Bank", A, "1.1", False),
    ("1.1.2", "Trade Receivables", A, "1.1", False),
    ("1.1.3", "Inventory", A, "1.1", False),
    ("1.1.4", "Other Current Assets", A, "1.1", False),
    ("1.2", "Non-Current Assets", A, "1", False),
    ("1.2.1", "Fixed Assets – Tangible", A, "1.2", False),
    ("1.2.2", "Fixed Assets – Intangible", A, "1.2", False),
    ("2", "LIABILITIES", L, None, False),
    ("2.1", "Current Liabilities", L, "2", False),
    ("2.1.1", "Trade Payables", L, "2.1", False),
    ("2.1.2", "Statutory Liabilities", L, "2.1", False),
    ("2.1.3", "Other Current Liabilities", L, "2.1", False),
    ("2.2", "Non-Current Liabilities", L, "2", False),
    ("2.2.1", "Borrowings", L, "2.2", False),
    ("3", "EQUITY", E, None, False),
    ("3.1", "Share Capital", E, "3", False),
    ("3.2", "Reserves & Surplus", E, "3", False),
    ("4", "INCOME", R, None, False),
    ("4.1", "Operating Income", R, "4", False),
    ("4.2", "Other Income", R, "4", False),
    ("5", "COST OF GOODS SOLD (COGS)", X, None, False),
    ("6", "EXPENSES (INDIRECT)", X, None, False),
    ("6.1", "Administrative Expenses", X, "6", False),
    ("6.2", "Selling & Distribution Expenses", X, "6", False),
    ("6.3", "Employee Expenses", X, "6", False),
    ("6.4", "Finance Costs", X, "6", False),
    ("8", "SYSTEM / AUTO-CREATED GROUPS", A, None, True),
]

T = LedgerAccount

# (code, name, group_code, nature, account_type)
DEFAULT_LEDGERS = [
    ("L-1.1.1-1", "Cash in Hand", "1.1.1", A, T.TYPE_CASH),
    ("L-1.1.1-2", "Bank – Current Account", "1.1.1", A, T.TYPE_BANK),
    ("L-1.1.1-3", "Bank – Savings Account", "1.1.1", A, T.TYPE_BANK),
    ("L-1.1.2-1", "Trade Debtors – Domestic", "1.1.2", A, T.TYPE_RECEIVABLE),
    ("L-1.1.2-2", "Trade Debtors – Export", "1.1.2", A, T.TYPE_RECEIVABLE),
    ("L-1.1.3-1", "Stock-in-Hand – Raw Material", "1.1.3", A, T.TYPE_INVENTORY),
    ("L-1.1.3-2", "Stock-in-Hand – Work-in-Progress", "1.1.3", A, T.TYPE_INVENTORY),
    ("L-1.1.3-3", "Stock-in-Hand – Finished Goods", "1.1.3", A, T.TYPE_INVENTORY),
    ("L-1.1.3-4", "Stock-in-Hand – Spares", "1.1.3", A, T.TYPE_INVENTORY),
    ("L-1.1.4-1", "Input GST – CGST", "1.1.4", A, T.TYPE_GST_INPUT),
    ("L-1.1.4-2", "Input GST – SGST", "1.1.4", A, T.TYPE_GST_INPUT),
    ("L-1.1.4-3", "Input GST – IGST", "1.1.4", A, T.TYPE_GST_INPUT),
    ("L-1.1.4-6", "Advance to Suppliers", "1.1.4", A, T.TYPE_OTHER),
    ("L-1.2.1-3", "Plant & Machinery", "1.2.1", A, T.TYPE_OTHER),
    ("L-1.2.1-5", "Office Equipment", "1.2.1", A, T.TYPE_OTHER),
    ("L-1.2.2-1", "Software", "1.2.2", A, T.TYPE_OTHER),
    ("L-2.1.1-1", "Trade Creditors – Domestic", "2.1.1", L, T.TYPE_PAYABLE),
    ("L-2.1.1-2", "Trade Creditors – Import", "2.1.1", L, T.TYPE_PAYABLE),
    ("L-2.1.2-1", "Output GST – CGST", "2.1.2", L, T.TYPE_GST_OUTPUT),
    ("L-2.1.2-2", "Output GST – SGST", "2.1.2", L, T.TYPE_GST_OUTPUT),
    ("L-2.1.2-3", "Output GST – IGST", "2.1.2", L, T.TYPE_GST_OUTPUT),
    ("L-2.1.2-4", "GST Payable (Net)", "2.1.2", L, T.TYPE_GST_OUTPUT),
    ("L-2.1.2-5", "TDS Payable", "2.1.2", L, T.TYPE_OTHER),
    ("L-2.1.3-1", "Outstanding Expenses", "2.1.3", L, T.TYPE_OTHER),
    ("L-2.1.3-2", "Salary Payable", "2.1.3", L, T.TYPE_OTHER),
    ("L-2.1.3-4", "Commission Payable", "2.1.3", L, T.TYPE_PAYABLE),
    ("L-2.1.3-5", "Unearned Revenue", "2.1.3", L, T.TYPE_OTHER),
    ("L-2.2.1-1", "Term Loan – Bank", "2.2.1", L, T.TYPE_OTHER),
    ("L-3.1-1", "Equity Share Capital", "3.1", E, T.TYPE_OTHER),
    ("L-3.2-2", "General Reserve", "3.2", E, T.TYPE_OTHER),
    ("L-3.2-3", "Retained Earnings / P&L Balance", "3.2", E, T.TYPE_OTHER),
    ("L-4.1-1", "Sales – Domestic", "4.1", R, T.TYPE_INCOME),
    ("L-4.1-2", "Sales – Export", "4.1", R, T.TYPE_INCOME),
    ("L-4.1-3", "Service Income", "4.1", R, T.TYPE_INCOME),
    ("L-4.2-1", "Interest Income", "4.2", R, T.TYPE_INCOME),
    ("L-4.2-2", "Discount Received", "4.2", R, T.TYPE_INCOME),
    ("L-5-1", "Opening Stock", "5", X, T.TYPE_EXPENSE),
    ("L-5-2", "Purchase – Raw Material", "5", X, T.TYPE_EXPENSE),
    ("L-5-3", "Purchase – Finished Goods", "5", X, T.TYPE_EXPENSE),
    ("L-5-4", "Direct Labour", "5", X, T.TYPE_EXPENSE),
    ("L-5-7", "Freight Inward", "5", X, T.TYPE_EXPENSE),
    ("L-5-10", "Cost of Goods Sold", "5", X, T.TYPE_EXPENSE),
    ("L-6.1-1", "Office Rent", "6.1", X, T.TYPE_EXPENSE),
    ("L-6.1-9", "Software Subscription", "6.1", X, T.TYPE_EXPENSE),
    ("L-6.2-1", "Sales Commission", "6.2", X, T.TYPE_EXPENSE),
    ("L-6.2-2", "Dealer Commission", "6.2", X, T.TYPE_EXPENSE),
    ("L-6.2-4", "Freight Outward", "6.2", X, T.TYPE_EXPENSE),
    ("L-6.3-1", "Salaries & Wages", "6.3", X, T.TYPE_EXPENSE),
    ("L-6.4-3", "Bank Charges", "6.4", X, T.TYPE_EXPENSE),
    ("SYS-1", "Opening Balance Adjustment", "8", A, T.TYPE_OTHER),
    ("SYS-2", "Round-Off", "8", X, T.TYPE_OTHER),
    ("SYS-5", "Suspense Account", "8", A, T.TYPE_OTHER),
]

_LEDGER_CODE_RE = re.compile(r"^L-(?P<group>[\d.]+)-(?P<n>\d+)$")


def _seed_groups() -> tuple[int, int]:
    created = updated = 0
    by_code: dict[str, AccountGroup] = {}

    for sort_order, (code, name, nature, parent_code, is_system) in enumerate(DEFAULT_GROUPS, start=1):
        parent = by_code.get(parent_code) if parent_code else None
        group, was_created = AccountGroup.objects.get_or_create(
            code=code,
            defaults={
                "name": name,
                "nature": nature,
                "parent": parent,
                "sort_order": sort_order,
                "is_system": is_system,
            },
        )
        by_code[code] = group

        if was_created:
            created += 1
            continue

        if (group.name, group.nature, group.parent_id) != (name, nature, getattr(parent, "pk", None)):
            group.name = name
            group.nature = nature
            group.parent = parent
            group.save()
            updated += 1

    return created, updated


def _seed_ledgers() -> tuple[int, int]:
    created = updated = 0
    groups = {g.code: g for g in AccountGroup.objects.all()}

    for code, name, group_code, nature, account_type in DEFAULT_LEDGERS:
        acc, was_created = LedgerAccount.objects.get_or_create(
            code=code,
            defaults={
                "name": name,
                "group": groups[group_code],
                "nature": nature,
                "account_type": account_type,
                "is_system": group_code == "8",
            },
        )
        if was_created:
            created += 1
            continue

        needs_update = False
        if acc.name != name:
            acc.name = name
            needs_update = True
        if acc.group_id != groups[group_code].pk:
            acc.group = groups[group_code]
            needs_update = True
        if acc.status != LedgerAccount.ACTIVE:
            acc.status = LedgerAccount.ACTIVE
            needs_update = True

        if needs_update:
            acc.save()
            updated += 1

    return created, updated


def _sync_ledger_counters() -> None:
    highest: dict[str, int] = {}
    for code in LedgerAccount.objects.values_list("code", flat=True):
        m = _LEDGER_CODE_RE.match(code)
        if m:
            group = m.group("group")
            highest[group] = max(highest.get(group, 0), int(m.group("n")))

    for group_code, n in highest.items():
        raise_counter_to(f"ledger_accounts:{group_code}", n)


@transaction.atomic
def seed_chart_of_accounts() -> dict:
    """Create / correct the default chart. Returns per-kind counts."""
    groups_created, groups_updated = _seed_groups()
    ledgers_created, ledgers_updated = _seed_ledgers()
    _sync_ledger_counters()

    summary = {
        "groups_created": groups_created,
        "groups_updated": groups_updated,
        "ledgers_created": ledgers_created,
        "ledgers_updated": ledgers_updated,
    }
    logger.info("Chart of accounts seeded", extra=summary)
    return summary
