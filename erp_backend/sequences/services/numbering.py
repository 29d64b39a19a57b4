# sequences/services/numbering.py

"""
DOCUMENT NUMBER FORMATTER

Canonical, wire-visible document codes:

    <PREFIX>-<YY><MM>-<NNNN>      e.g. SO-2506-0001

- format_document_number() is pure: same inputs -> same string.
- period_prefix() yields the "<PREFIX>-<YY><MM>-" stem used for
  lexicographic range scans over stored numbers.
- next_document_number() allocates from the series' counter and formats,
  inside the caller's transaction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

from django.utils import timezone

from backend.conf import automation_setting
from sequences.services.allocator import allocate

_NUMBER_RE = re.compile(r"^(?P<prefix>[A-Z0-9]+)-(?P<yymm>\d{4})-(?P<seq>\d+)$")


@dataclass(frozen=True)
class DocumentSeries:
    """A numbered document kind: which counter feeds it, which field stores it."""

    key: str
    counter_name: str
    model_label: str
    number_field: str

    @property
    def prefix(self) -> str:
        return automation_setting("DOCUMENT_PREFIXES")[self.key]


DOCUMENT_SERIES: dict[str, DocumentSeries] = {
    s.key: s
    for s in (
        DocumentSeries("orders", "sales_orders", "sales.Order", "order_number"),
        DocumentSeries("invoices", "sales_invoices", "sales.SalesInvoice", "invoice_number"),
        DocumentSeries("quotations", "quotations", "sales.Quotation", "quotation_number"),
        DocumentSeries("work_orders", "work_orders", "products.WorkOrder", "work_order_number"),
        DocumentSeries("credit_notes", "credit_notes", "sales.CreditNote", "credit_note_number"),
        DocumentSeries("debit_notes", "debit_notes", "sales.DebitNote", "debit_note_number"),
    )
}


def get_series(key: str) -> DocumentSeries:
    try:
        return DOCUMENT_SERIES[key]
    except KeyError as exc:
        raise ValueError(f"Unknown document series: {key!r}") from exc


def _yymm(period: date | datetime) -> str:
    return f"{period.year % 100:02d}{period.month:02d}"


def period_prefix(prefix: str, period: date | datetime) -> str:
    prefix = (prefix or "").strip().upper()
    if not prefix:
        raise ValueError("prefix is required")
    return f"{prefix}-{_yymm(period)}-"


def format_document_number(
    prefix: str,
    period: date | datetime,
    sequence: int,
    digits: int | None = None,
) -> str:
    if digits is None:
        digits = automation_setting("NUMBER_DIGITS")
    if int(digits) < 1:
        raise ValueError("digits must be >= 1")
    if int(sequence) < 1:
        raise ValueError("sequence must be >= 1")

    # zfill pads but never truncates: 10000 stays 10000 at width 4
    return f"{period_prefix(prefix, period)}{str(int(sequence)).zfill(int(digits))}"


def parse_document_number(number: str) -> tuple[str, str, int]:
    """Split "SO-2506-0001" into ("SO", "2506", 1)."""
    m = _NUMBER_RE.match((number or "").strip())
    if not m:
        raise ValueError(f"Malformed document number: {number!r}")
    return m.group("prefix"), m.group("yymm"), int(m.group("seq"))


def next_document_number(series_key: str, *, now: datetime | None = None) -> str:
    """Allocate + format the next number of a series (caller holds the transaction)."""
    series = get_series(series_key)
    if now is None:
        period = timezone.localtime()
    elif timezone.is_aware(now):
        period = timezone.localtime(now)
    else:
        period = now
    sequence = allocate(series.counter_name)
    return format_document_number(series.prefix, period, sequence)
