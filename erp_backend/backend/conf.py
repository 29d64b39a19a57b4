# backend/conf.py
"""
PATH: backend/conf.py

AUTOMATION SETTINGS RESOLVER

Single read path for settings.AUTOMATION.

Priority:
1) settings.AUTOMATION[key] (env-driven, see settings/base.py)
2) DEFAULTS below

Nested dicts (ACCOUNTS, DOCUMENT_PREFIXES) are merged key-by-key, so a
deployment can rename one ledger without restating the whole map.
"""

from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "SHARD_COUNT": 5,
    "NUMBER_DIGITS": 4,
    "TRANSACTION_ATTEMPTS": 5,
    "TRANSACTION_BACKOFF_SECONDS": 0.05,
    "DISPATCH_ON_SAVE": True,
    "STRICT_BALANCE": False,
    "WEBHOOK_SECRET": "",
    "RECEIVABLES_GROUP": "1.1.2",
    # Semantic key -> exact ledger account name in the chart of accounts
    "ACCOUNTS": {
        "BANK": "Bank – Current Account",
        "SALES": "Sales – Domestic",
        "CGST": "Output GST – CGST",
        "SGST": "Output GST – SGST",
        "IGST": "Output GST – IGST",
        "COGS": "Cost of Goods Sold",
        "INVENTORY": "Stock-in-Hand – Finished Goods",
        "SALES_RETURNS": "Sales – Domestic",
        "PURCHASE_RETURNS": "Purchase – Finished Goods",
    },
    # Numbered document series -> prefix
    "DOCUMENT_PREFIXES": {
        "orders": "SO",
        "invoices": "INV",
        "quotations": "QU",
        "work_orders": "WO",
        "credit_notes": "CN",
        "debit_notes": "DN",
    },
}


def _configured() -> dict:
    cfg = getattr(settings, "AUTOMATION", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


def automation_setting(key: str) -> Any:
    key = (key or "").strip().upper()
    if key not in DEFAULTS:
        raise KeyError(f"Unknown AUTOMATION setting: {key}")

    default = DEFAULTS[key]
    value = _configured().get(key, default)

    if isinstance(default, dict):
        merged = dict(default)
        merged.update(value or {})
        return merged

    return value
