# automation/transactions.py

"""
TRANSACTION RUNNER

run_in_transaction() executes one logical operation in ONE atomic block
and retries it when the database reports contention (lock timeout,
deadlock, serialization failure, SQLite "database is locked").

Retry only makes sense at the outermost level: when called inside an
existing atomic block the operation runs once, joined to that block, and
contention propagates to whoever owns the outer transaction.
"""

from __future__ import annotations

import logging
import time

from django.db import OperationalError, transaction

from backend.conf import automation_setting

logger = logging.getLogger(__name__)


def run_in_transaction(fn, *args, attempts: int | None = None, backoff: float | None = None, **kwargs):
    if attempts is None:
        attempts = int(automation_setting("TRANSACTION_ATTEMPTS"))
    if backoff is None:
        backoff = float(automation_setting("TRANSACTION_BACKOFF_SECONDS"))
    attempts = max(1, attempts)

    if transaction.get_connection().in_atomic_block:
        with transaction.atomic():
            return fn(*args, **kwargs)

    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                return fn(*args, **kwargs)
        except OperationalError as exc:
            if attempt >= attempts:
                logger.error(
                    "Transaction failed after retries",
                    extra={"operation": getattr(fn, "__name__", repr(fn)), "attempts": attempts},
                )
                raise
            logger.warning(
                "Transaction contention; retrying",
                extra={
                    "operation": getattr(fn, "__name__", repr(fn)),
                    "attempt": attempt,
                    "error": str(exc),
                },
            )
            if backoff > 0:
                time.sleep(backoff * attempt)

    raise RuntimeError("run_in_transaction exhausted without result")
