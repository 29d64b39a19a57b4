# automation/dispatcher.py

"""
======================================================
PATH: automation/dispatcher.py
======================================================
EVENT DISPATCHER

handle(event) is the single entry point for document events, whether
they come from model signals, the webhook, or a test:

1) route (collection, event_type) to its handler
2) validate the snapshots (invalid -> QuarantinedEvent, status "quarantined")
3) in ONE transaction (retried on contention):
   - ProcessedEvent hit -> "duplicate"
   - run the handler (it locks its document and re-checks field guards)
   - record ProcessedEvent with the outcome
4) anything else raised by the handler (configuration errors) aborts the
   transaction and propagates to the caller
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from automation.events import (
    DUPLICATE,
    QUARANTINED,
    SKIPPED,
    DocumentEvent,
    EventSchemaError,
    HandlerResult,
    UnknownEventError,
)
from automation.handlers import COLLECTIONS, HANDLERS
from automation.models import ProcessedEvent, QuarantinedEvent
from automation.schemas import validate_snapshot
from automation.transactions import run_in_transaction

logger = logging.getLogger(__name__)


class _AlreadyProcessed(Exception):
    """A concurrent delivery recorded the event first; roll back and report duplicate."""


def _route(event: DocumentEvent):
    if event.collection not in COLLECTIONS:
        raise UnknownEventError(f"Unknown collection: {event.collection!r}")
    return HANDLERS.get(event.key)


def _validate(event: DocumentEvent) -> None:
    for label, snapshot in (("after", event.after), ("before", event.before)):
        if snapshot is None:
            continue
        try:
            validate_snapshot(event.collection, snapshot)
        except EventSchemaError as exc:
            raise EventSchemaError(f"{label}: {exc}", {label: exc.errors}) from exc


def _quarantine(event: DocumentEvent, exc: EventSchemaError) -> HandlerResult:
    QuarantinedEvent.objects.create(
        event_id=event.event_id,
        collection=event.collection,
        event_type=event.event_type,
        document_id=event.document_id,
        payload={"before": event.before, "after": event.after},
        errors=exc.errors,
    )
    logger.warning(
        "Event quarantined: invalid snapshot",
        extra={
            "event_id": event.event_id,
            "collection": event.collection,
            "document_id": event.document_id,
        },
    )
    return HandlerResult(status=QUARANTINED, detail=str(exc), data={"errors": exc.errors})


def _apply(event: DocumentEvent, handler_name: str, fn) -> HandlerResult:
    if ProcessedEvent.objects.filter(event_id=event.event_id, handler=handler_name).exists():
        return HandlerResult(status=DUPLICATE, handler=handler_name, detail="event already processed")

    result = fn(event)
    result.handler = handler_name

    try:
        with transaction.atomic():
            ProcessedEvent.objects.create(
                event_id=event.event_id,
                handler=handler_name,
                collection=event.collection,
                event_type=event.event_type,
                document_id=event.document_id,
                outcome=result.status,
                detail=(result.detail or "")[:255],
            )
    except IntegrityError as exc:
        raise _AlreadyProcessed(event.event_id) from exc

    return result


def handle(event: DocumentEvent) -> HandlerResult:
    route = _route(event)
    if route is None:
        return HandlerResult(status=SKIPPED, detail=f"no handler for {event.collection} {event.event_type}")

    handler_name, fn = route

    try:
        _validate(event)
    except EventSchemaError as exc:
        return _quarantine(event, exc)

    try:
        result = run_in_transaction(_apply, event, handler_name, fn)
    except _AlreadyProcessed:
        result = HandlerResult(status=DUPLICATE, handler=handler_name, detail="event processed concurrently")
    except Exception:
        logger.exception(
            "Event handler failed",
            extra={
                "event_id": event.event_id,
                "handler": handler_name,
                "collection": event.collection,
                "document_id": event.document_id,
            },
        )
        raise

    logger.info(
        "Event handled",
        extra={
            "event_id": event.event_id,
            "handler": handler_name,
            "outcome": result.status,
            "detail": result.detail,
        },
    )
    return result
