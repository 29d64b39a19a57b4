# accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which ledger account should be used for this purpose?"

Design goals:
- deterministic
- hard-fail on missing setup (so we don't post to wrong accounts)
- no caching: every call re-reads inside the caller's transaction

Semantic accounts (SALES, BANK, CGST, ...) map to ledger NAMES through
AUTOMATION["ACCOUNTS"], so a deployment can rename ledgers without code
changes.

Party ledgers:
- Every customer gets their OWN receivable ledger, created lazily on the
  first transaction and remembered on the Party row.
"""

from __future__ import annotations

import logging

from accounting.models import AccountGroup, CompanyProfile, LedgerAccount
from accounting.services.exceptions import AccountResolutionError
from backend.conf import automation_setting
from sales.models import Party
from sequences.services.allocator import allocate

logger = logging.getLogger(__name__)

SEMANTIC_KEYS = (
    "BANK",
    "SALES",
    "CGST",
    "SGST",
    "IGST",
    "COGS",
    "INVENTORY",
    "SALES_RETURNS",
    "PURCHASE_RETURNS",
)

# New party ledgers need a free code; collisions only happen when someone
# created L-<group>-<n> by hand ahead of the counter.
MAX_CODE_ATTEMPTS = 20


# ============================================================
# NAME / SEMANTIC RESOLUTION
# ============================================================


def resolve_account_by_name(name: str) -> LedgerAccount:
    name = (name or "").strip()
    if not name:
        raise AccountResolutionError("Ledger account name is required")

    account = (
        LedgerAccount.objects.filter(name=name, status=LedgerAccount.ACTIVE)
        .order_by("id")
        .first()
    )
    if account is None:
        raise AccountResolutionError(
            f"Ledger account '{name}' not found. Run seed_chart or fix AUTOMATION['ACCOUNTS']."
        )
    return account


def resolve_semantic_account(key: str) -> LedgerAccount:
    key = (key or "").strip().upper()
    if key not in SEMANTIC_KEYS:
        raise AccountResolutionError(f"Unknown semantic account: {key!r}")

    mapping = automation_setting("ACCOUNTS")
    name = mapping.get(key)
    if not name:
        raise AccountResolutionError(f"No ledger configured for semantic account {key}")
    return resolve_account_by_name(name)


def resolve_bank_account() -> LedgerAccount:
    """
    Bank ledger for incoming payments.

    The ledger whose upi_id matches the company's primary UPI id wins;
    otherwise the configured default bank ledger.
    """
    profile = CompanyProfile.current()
    upi_id = (getattr(profile, "primary_upi_id", "") or "").strip()

    if upi_id:
        account = (
            LedgerAccount.objects.filter(upi_id=upi_id, status=LedgerAccount.ACTIVE)
            .order_by("id")
            .first()
        )
        if account is not None:
            return account
        logger.warning(
            "No bank ledger carries the primary UPI id; using default bank",
            extra={"upi_id": upi_id},
        )

    return resolve_semantic_account("BANK")


# ============================================================
# PARTY LEDGERS
# ============================================================


def _receivables_group() -> AccountGroup:
    code = automation_setting("RECEIVABLES_GROUP")
    group = AccountGroup.objects.filter(code=code).first()
    if group is None:
        raise AccountResolutionError(
            f"Receivables group '{code}' not found. Run seed_chart or fix AUTOMATION['RECEIVABLES_GROUP']."
        )
    return group


def _next_ledger_code(group: AccountGroup) -> str:
    counter = f"ledger_accounts:{group.code}"
    for _ in range(MAX_CODE_ATTEMPTS):
        code = f"L-{group.code}-{allocate(counter)}"
        if not LedgerAccount.objects.filter(code=code).exists():
            return code
    raise AccountResolutionError(f"Could not find a free ledger code in group {group.code}")


def _create_party_ledger(*, name: str) -> LedgerAccount:
    group = _receivables_group()
    account = LedgerAccount.objects.create(
        code=_next_ledger_code(group),
        name=name,
        group=group,
        nature=LedgerAccount.ASSET,
        account_type=LedgerAccount.TYPE_RECEIVABLE,
        normal_balance=LedgerAccount.DEBIT,
        is_posting=True,
        allow_manual_journal=True,
        status=LedgerAccount.ACTIVE,
        opening_balance=0,
        opening_balance_side=LedgerAccount.DEBIT,
    )
    logger.info(
        "Created party ledger",
        extra={"ledger_code": account.code, "ledger_name": account.name},
    )
    return account


def resolve_account_for_party(
    *,
    party_id: str,
    name: str,
    email: str = "",
    party_type: str = Party.CUSTOMER,
) -> LedgerAccount:
    """
    The party's own ledger, creating / linking it on first use.

    Order of preference:
    1) Party row already references a ledger -> reuse it
    2) A ledger with the party's display name exists -> link it
    3) Create a new receivable ledger and link it

    Must run inside the caller's transaction (the Party row is locked).
    """
    party_id = str(party_id or "").strip()
    if not party_id:
        raise AccountResolutionError("party_id is required to resolve a party ledger")

    name = (name or "").strip()
    email = (email or "").strip()

    party = Party.objects.select_for_update().filter(pk=party_id).first()
    if party is not None and party.ledger_account_id:
        return party.ledger_account

    account = None
    if name:
        account = (
            LedgerAccount.objects.filter(name=name, status=LedgerAccount.ACTIVE)
            .order_by("id")
            .first()
        )
    if account is None:
        account = _create_party_ledger(name=name or party_id)

    if party is None:
        Party.objects.create(
            id=party_id,
            name=name or party_id,
            email=email,
            party_type=party_type,
            ledger_account=account,
        )
    else:
        party.ledger_account = account
        party.save(update_fields=["ledger_account", "updated_at"])

    return account


def require_party_account(party_id: str) -> LedgerAccount:
    """Ledger of an existing party; never creates one."""
    party_id = str(party_id or "").strip()
    party = Party.objects.select_related("ledger_account").filter(pk=party_id).first()
    if party is None or party.ledger_account is None:
        raise AccountResolutionError(f"No ledger account linked to party '{party_id}'")
    return party.ledger_account
