# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.

Classification:
- AccountResolutionError is a configuration error (fatal, never retried)
- PostingRuleError / VoucherCreationError mean the inputs cannot be posted
- IdempotencyError means the voucher already exists (duplicate delivery)
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class PostingRuleError(AccountingServiceError):
    """Raised when a posting rule cannot be applied."""


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""


class VoucherCreationError(AccountingServiceError):
    """Raised when a voucher cannot be created."""


class IdempotencyError(AccountingServiceError):
    """Raised on duplicate or retried accounting events."""
