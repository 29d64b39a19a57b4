# automation/views.py

"""
EVENT WEBHOOK

POST /api/automation/events/

Responses:
- 200 {"ok": true, "status": applied|skipped|duplicate|quarantined, ...}
- 400 bad signature / malformed envelope / unknown event
- 500 handler failed (configuration error, contention after retries):
      the sender is expected to redeliver
"""

from __future__ import annotations

import logging

from django.db import OperationalError
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from accounting.services.exceptions import AccountingServiceError
from automation.dispatcher import handle
from automation.events import AutomationError, DocumentEvent
from automation.schemas import EventEnvelopeSerializer
from automation.signature import SIGNATURE_HEADER, verify_signature
from partners.services.commission import CommissionError
from sequences.services.allocator import SequenceAllocationError

logger = logging.getLogger(__name__)

FATAL_ERRORS = (
    AccountingServiceError,
    CommissionError,
    SequenceAllocationError,
    OperationalError,
)


class WebhookThrottle(AnonRateThrottle):
    scope = "automation_webhook"


class AutomationEventWebhookView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    @extend_schema(request=EventEnvelopeSerializer, responses={200: dict, 400: dict, 500: dict})
    def post(self, request, *args, **kwargs):
        raw_body = request.body or b""
        signature = request.headers.get(SIGNATURE_HEADER)

        if not verify_signature(raw_body=raw_body, signature=signature):
            logger.warning("Invalid automation webhook signature")
            return Response({"ok": False, "detail": "Invalid signature"}, status=status.HTTP_400_BAD_REQUEST)

        envelope = EventEnvelopeSerializer(data=request.data)
        if not envelope.is_valid():
            logger.warning("Malformed automation event", extra={"errors": envelope.errors})
            return Response({"ok": False, "errors": envelope.errors}, status=status.HTTP_400_BAD_REQUEST)

        data = envelope.validated_data
        try:
            event = DocumentEvent(
                collection=data["collection"],
                event_type=data["event_type"],
                document_id=data["document_id"],
                before=data.get("before"),
                after=data.get("after"),
                event_id=data.get("event_id") or "",
                occurred_at=data.get("occurred_at"),
            )
            result = handle(event)
        except AutomationError as exc:
            logger.warning("Rejected automation event", extra={"error": str(exc)})
            return Response({"ok": False, "detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except FATAL_ERRORS as exc:
            # already logged with traceback by the dispatcher
            return Response(
                {"ok": False, "detail": f"{type(exc).__name__}: {exc}"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"ok": True, **result.as_dict()}, status=status.HTTP_200_OK)
