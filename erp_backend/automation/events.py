# automation/events.py

"""
======================================================
PATH: automation/events.py
======================================================
DOCUMENT EVENTS

A DocumentEvent is one notification that a document was created or
updated. Delivery is at-least-once: the same event_id may arrive more
than once and handlers must tolerate it.

    DocumentEvent(
        collection="orders",
        event_type="created",
        document_id="6f0c...",
        before=None,
        after={...snapshot...},
        event_id="orders:6f0c...:created",
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

CREATED = "created"
UPDATED = "updated"
EVENT_TYPES = (CREATED, UPDATED)

APPLIED = "applied"
SKIPPED = "skipped"
DUPLICATE = "duplicate"
QUARANTINED = "quarantined"


# ============================================================
# DOMAIN ERRORS
# ============================================================


class AutomationError(Exception):
    """Base exception for the automation layer."""


class UnknownEventError(AutomationError):
    """Raised for a collection / event type nobody handles."""


class EventSchemaError(AutomationError):
    """Raised when a document snapshot fails validation."""

    def __init__(self, message: str, errors: Any = None):
        super().__init__(message)
        self.errors = errors or {}


# ============================================================
# VALUE OBJECTS
# ============================================================


@dataclass(frozen=True)
class DocumentEvent:
    collection: str
    event_type: str
    document_id: str
    before: dict | None = None
    after: dict | None = None
    event_id: str = ""
    occurred_at: datetime | None = None

    def __post_init__(self):
        if self.event_type not in EVENT_TYPES:
            raise UnknownEventError(f"Unknown event type: {self.event_type!r}")
        if not str(self.document_id or "").strip():
            raise AutomationError("document_id is required")
        object.__setattr__(self, "document_id", str(self.document_id).strip())

        # Creation happens once per document, so a stable id is derivable.
        # Updates have no natural key and must carry their own id.
        if not (self.event_id or "").strip():
            if self.event_type != CREATED:
                raise AutomationError("event_id is required for update events")
            object.__setattr__(
                self, "event_id", f"{self.collection}:{self.document_id}:{CREATED}"
            )

    @property
    def key(self) -> tuple[str, str]:
        return self.collection, self.event_type


@dataclass
class HandlerResult:
    status: str
    handler: str = ""
    detail: str = ""
    data: dict = field(default_factory=dict)

    @property
    def changed_state(self) -> bool:
        return self.status == APPLIED

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "handler": self.handler,
            "detail": self.detail,
            "data": self.data,
        }


def applied(detail: str = "", **data) -> HandlerResult:
    return HandlerResult(status=APPLIED, detail=detail, data=data)


def skipped(detail: str = "", **data) -> HandlerResult:
    return HandlerResult(status=SKIPPED, detail=detail, data=data)
