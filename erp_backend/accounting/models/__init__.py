# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import LedgerAccount
from accounting.models.company import CompanyProfile
from accounting.models.group import AccountGroup
from accounting.models.voucher import Voucher, VoucherEntry

__all__ = [
    "AccountGroup",
    "LedgerAccount",
    "Voucher",
    "VoucherEntry",
    "CompanyProfile",
]
