# automation/schemas.py

"""
======================================================
PATH: automation/schemas.py
======================================================
DOCUMENT SNAPSHOT SCHEMAS (DRF)

Every snapshot crossing the event boundary is validated here before a
handler sees it. The same serializers render model instances into
snapshots (signals), so both directions share one shape.

Versioning:
- snapshots may carry "schema_version"; absent means 1
- an unsupported version is a schema error (quarantined)
"""

from __future__ import annotations

from rest_framework import serializers

from automation.events import EVENT_TYPES, EventSchemaError
from products.models import WorkOrder
from sales.models import Order

SCHEMA_VERSION = 1
SUPPORTED_SCHEMA_VERSIONS = {1}


def _money(**kwargs):
    kwargs.setdefault("max_digits", 14)
    kwargs.setdefault("decimal_places", 2)
    kwargs.setdefault("required", False)
    return serializers.DecimalField(**kwargs)


class SnapshotSerializer(serializers.Serializer):
    id = serializers.CharField(required=False)
    schema_version = serializers.IntegerField(required=False, default=SCHEMA_VERSION)

    def validate_schema_version(self, value):
        if value not in SUPPORTED_SCHEMA_VERSIONS:
            raise serializers.ValidationError(f"Unsupported schema_version {value}")
        return value

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["schema_version"] = SCHEMA_VERSION
        return data


# ============================================================
# LINE ITEMS
# ============================================================


class OrderItemSnapshotSerializer(serializers.Serializer):
    product_id = serializers.CharField(required=False, allow_blank=True, default="")
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=0)
    price = _money(min_value=0)
    category = serializers.CharField(required=False, allow_blank=True, default="")


class InvoiceItemSnapshotSerializer(serializers.Serializer):
    product_id = serializers.CharField(required=False, allow_blank=True, default="")
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=0)
    rate = _money(min_value=0)
    category = serializers.CharField(required=False, allow_blank=True, default="")


# ============================================================
# DOCUMENTS
# ============================================================


class OrderSnapshotSerializer(SnapshotSerializer):
    order_number = serializers.CharField(required=False, allow_blank=True, default="")
    customer_id = serializers.CharField()
    customer_name = serializers.CharField()
    customer_email = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=Order.Status.choices)
    grand_total = _money(min_value=0)
    payment_received = _money(min_value=0)
    commission = _money(allow_null=True)
    assigned_partner = serializers.CharField(
        source="assigned_partner_id", required=False, allow_null=True, allow_blank=True
    )
    items = OrderItemSnapshotSerializer(many=True, required=False)


class InvoiceSnapshotSerializer(SnapshotSerializer):
    invoice_number = serializers.CharField(required=False, allow_blank=True, default="")
    order = serializers.CharField(source="order_id", required=False, allow_null=True, allow_blank=True)
    customer_id = serializers.CharField()
    customer_name = serializers.CharField()
    date = serializers.DateField(required=False)
    taxable_amount = _money(min_value=0)
    cgst = _money(min_value=0)
    sgst = _money(min_value=0)
    igst = _money(min_value=0)
    grand_total = _money(min_value=0)
    amount_paid = _money(min_value=0)
    items = InvoiceItemSnapshotSerializer(many=True, required=False)


class QuotationSnapshotSerializer(SnapshotSerializer):
    quotation_number = serializers.CharField(required=False, allow_blank=True, default="")
    customer_name = serializers.CharField()
    grand_total = _money(min_value=0)


class WorkOrderSnapshotSerializer(SnapshotSerializer):
    work_order_number = serializers.CharField(required=False, allow_blank=True, default="")
    product = serializers.CharField(source="product_id", required=False, allow_null=True, allow_blank=True)
    quantity = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(choices=WorkOrder.Status.choices, required=False)


class CreditNoteSnapshotSerializer(SnapshotSerializer):
    credit_note_number = serializers.CharField(required=False, allow_blank=True, default="")
    party_id = serializers.CharField()
    party_name = serializers.CharField()
    amount = _money(min_value=0)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class DebitNoteSnapshotSerializer(SnapshotSerializer):
    debit_note_number = serializers.CharField(required=False, allow_blank=True, default="")
    party_id = serializers.CharField()
    party_name = serializers.CharField()
    amount = _money(min_value=0)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


SNAPSHOT_SERIALIZERS: dict[str, type[SnapshotSerializer]] = {
    "orders": OrderSnapshotSerializer,
    "invoices": InvoiceSnapshotSerializer,
    "quotations": QuotationSnapshotSerializer,
    "work_orders": WorkOrderSnapshotSerializer,
    "credit_notes": CreditNoteSnapshotSerializer,
    "debit_notes": DebitNoteSnapshotSerializer,
}


# ============================================================
# EVENT ENVELOPE (WEBHOOK)
# ============================================================


class EventEnvelopeSerializer(serializers.Serializer):
    event_id = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    collection = serializers.ChoiceField(choices=sorted(SNAPSHOT_SERIALIZERS))
    event_type = serializers.ChoiceField(choices=EVENT_TYPES)
    document_id = serializers.CharField(max_length=64)
    before = serializers.DictField(required=False, allow_null=True, default=None)
    after = serializers.DictField(required=False, allow_null=True, default=None)
    occurred_at = serializers.DateTimeField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["event_type"] == "updated" and not attrs.get("event_id"):
            raise serializers.ValidationError({"event_id": "event_id is required for update events"})
        return attrs


# ============================================================
# PUBLIC API
# ============================================================


def snapshot_serializer_for(collection: str) -> type[SnapshotSerializer]:
    try:
        return SNAPSHOT_SERIALIZERS[collection]
    except KeyError as exc:
        raise EventSchemaError(f"No schema for collection {collection!r}") from exc


def validate_snapshot(collection: str, data) -> dict:
    """Validated snapshot data; raises EventSchemaError with field errors."""
    if not isinstance(data, dict):
        raise EventSchemaError("Snapshot must be an object", {"non_field_errors": ["not an object"]})

    serializer = snapshot_serializer_for(collection)(data=data)
    if not serializer.is_valid():
        raise EventSchemaError(f"Invalid {collection} snapshot", serializer.errors)
    return dict(serializer.validated_data)


def render_snapshot(collection: str, instance) -> dict:
    return dict(snapshot_serializer_for(collection)(instance).data)
